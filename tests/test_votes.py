"""
Tests for the answer/comment vote ledger
========================================

The stored score must always equal the number of upvoters minus the number
of downvoters, whatever sequence of votes produced it.
"""

import pytest

from stackit.errors import InvalidDirectionError
from stackit.models import VoteDirection
from stackit.services.votes import parse_direction


class TestParseDirection:

    @pytest.mark.parametrize("raw", ["up", "UP", " up ", 1])
    def test_up_spellings(self, raw):
        assert parse_direction(raw) is VoteDirection.up

    @pytest.mark.parametrize("raw", ["down", "Down", -1])
    def test_down_spellings(self, raw):
        assert parse_direction(raw) is VoteDirection.down

    @pytest.mark.parametrize("raw", ["sideways", "", 0, 2, 1.0, None, True, False])
    def test_rejects_everything_else(self, raw):
        with pytest.raises(InvalidDirectionError):
            parse_direction(raw)


class TestAnswerVotes:

    async def _setup(self, register, ask, answer):
        alice = await register("alice")
        bob = await register("bob")
        question = await ask(alice)
        ans = await answer(bob, question["id"])
        return alice, bob, question, ans

    async def test_upvote_twice_is_a_no_op(self, client, register, ask, answer):
        alice, bob, _, ans = await self._setup(register, ask, answer)

        first = await client.post(f"/api/answers/{ans['id']}/vote", json={"vote_type": "up"}, headers=alice["headers"])
        second = await client.post(f"/api/answers/{ans['id']}/vote", json={"vote_type": "up"}, headers=alice["headers"])

        assert first.status_code == second.status_code == 200
        assert second.json()["score"] == 1
        assert second.json()["upvoters"] == [alice["id"]]
        assert second.json()["downvoters"] == []
        assert second.json()["user_vote"] == "up"

    async def test_switching_direction_moves_score_by_two(self, client, register, ask, answer):
        alice, _, _, ans = await self._setup(register, ask, answer)

        up = await client.post(f"/api/answers/{ans['id']}/vote", json={"vote_type": "up"}, headers=alice["headers"])
        down = await client.post(f"/api/answers/{ans['id']}/vote", json={"vote_type": "down"}, headers=alice["headers"])

        assert down.json()["score"] - up.json()["score"] == -2
        assert down.json()["upvoters"] == []
        assert down.json()["downvoters"] == [alice["id"]]

    @pytest.mark.parametrize("direction", ["up", "down"])
    async def test_self_vote_rejected(self, client, register, ask, answer, direction):
        _, bob, _, ans = await self._setup(register, ask, answer)

        resp = await client.post(f"/api/answers/{ans['id']}/vote", json={"vote_type": direction}, headers=bob["headers"])

        assert resp.status_code == 400
        assert resp.json()["error"] == "self_vote"
        listing = await client.get(f"/api/answers/question/{ans['question_id']}")
        assert listing.json()[0]["score"] == 0

    @pytest.mark.parametrize("vote_type", ["sideways", True, 5, None])
    async def test_invalid_direction_rejected(self, client, register, ask, answer, vote_type):
        alice, _, _, ans = await self._setup(register, ask, answer)

        resp = await client.post(f"/api/answers/{ans['id']}/vote", json={"vote_type": vote_type}, headers=alice["headers"])

        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_direction"

    async def test_invalid_direction_beats_self_vote(self, client, register, ask, answer):
        _, bob, _, ans = await self._setup(register, ask, answer)
        resp = await client.post(f"/api/answers/{ans['id']}/vote", json={"vote_type": "meh"}, headers=bob["headers"])
        assert resp.json()["error"] == "invalid_direction"

    async def test_score_is_upvoters_minus_downvoters(self, client, register, ask, answer):
        alice, bob, question, ans = await self._setup(register, ask, answer)
        carol = await register("carol")
        dave = await register("dave")
        url = f"/api/answers/{ans['id']}/vote"

        await client.post(url, json={"vote_type": "up"}, headers=alice["headers"])
        await client.post(url, json={"vote_type": 1}, headers=carol["headers"])
        await client.post(url, json={"vote_type": "down"}, headers=dave["headers"])
        await client.post(url, json={"vote_type": "down"}, headers=carol["headers"])
        resp = await client.post(url, json={"vote_type": "up"}, headers=dave["headers"])

        body = resp.json()
        assert sorted(body["upvoters"]) == sorted([alice["id"], dave["id"]])
        assert body["downvoters"] == [carol["id"]]
        assert body["score"] == len(body["upvoters"]) - len(body["downvoters"]) == 1
        assert not set(body["upvoters"]) & set(body["downvoters"])

    async def test_vote_on_missing_answer(self, client, register):
        alice = await register("alice")
        resp = await client.post("/api/answers/999/vote", json={"vote_type": "up"}, headers=alice["headers"])
        assert resp.status_code == 404

    async def test_answers_listed_by_score(self, client, register, ask, answer):
        alice, bob, question, first = await self._setup(register, ask, answer)
        carol = await register("carol")
        second = await answer(carol, question["id"], "Use list.reverse() in place.")

        await client.post(f"/api/answers/{second['id']}/vote", json={"vote_type": "up"}, headers=alice["headers"])

        listing = await client.get(f"/api/answers/question/{question['id']}", headers=alice["headers"])
        assert [a["id"] for a in listing.json()] == [second["id"], first["id"]]
        assert listing.json()[0]["user_vote"] == "up"
        assert listing.json()[1]["user_vote"] is None

    async def test_vote_history(self, client, register, ask, answer, comment):
        alice, bob, _, ans = await self._setup(register, ask, answer)
        note = await comment(bob, ans)

        await client.post(f"/api/answers/{ans['id']}/vote", json={"vote_type": "down"}, headers=alice["headers"])
        await client.post(f"/api/comments/{note['id']}/vote", json={"vote_type": "up"}, headers=alice["headers"])

        resp = await client.get("/api/users/me/votes", headers=alice["headers"])
        entries = {(e["target"], e["target_id"]): e["vote_type"] for e in resp.json()}
        assert entries == {("answer", ans["id"]): "down", ("comment", note["id"]): "up"}


class TestCommentVotes:

    async def test_numeric_directions(self, client, register, ask, answer, comment):
        alice = await register("alice")
        bob = await register("bob")
        question = await ask(alice)
        ans = await answer(alice, question["id"])
        note = await comment(alice, ans)
        url = f"/api/comments/{note['id']}/vote"

        up = await client.post(url, json={"vote_type": 1}, headers=bob["headers"])
        assert up.json() == {"votes": 1, "user_vote": "up"}

        again = await client.post(url, json={"vote_type": 1}, headers=bob["headers"])
        assert again.json() == {"votes": 1, "user_vote": "up"}

        down = await client.post(url, json={"vote_type": -1}, headers=bob["headers"])
        assert down.json() == {"votes": -1, "user_vote": "down"}

    async def test_self_vote_on_comment_rejected(self, client, register, ask, answer, comment):
        alice = await register("alice")
        question = await ask(alice)
        ans = await answer(alice, question["id"])
        note = await comment(alice, ans)

        resp = await client.post(f"/api/comments/{note['id']}/vote", json={"vote_type": "up"}, headers=alice["headers"])

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Cannot vote on your own comment"
