"""
Tests for accepting answers
===========================
"""

from sqlalchemy import select

from stackit.models import Answer


async def accepted_count(session, question_id: int) -> int:
    rows = await session.execute(
        select(Answer.id).where(Answer.question_id == question_id, Answer.is_accepted.is_(True))
    )
    return len(rows.all())


class TestAcceptAnswer:
    """Only the question owner may accept, and at most one answer is accepted."""

    async def test_owner_accepts(self, client, register, ask, answer):
        alice = await register("alice")
        bob = await register("bob")
        question = await ask(alice)
        ans = await answer(bob, question["id"])

        resp = await client.post(f"/api/answers/{ans['id']}/accept", headers=alice["headers"])

        assert resp.status_code == 200
        assert resp.json()["is_accepted"] is True

    async def test_non_owner_forbidden(self, client, register, ask, answer):
        alice = await register("alice")
        bob = await register("bob")
        question = await ask(alice)
        ans = await answer(bob, question["id"])

        resp = await client.post(f"/api/answers/{ans['id']}/accept", headers=bob["headers"])

        assert resp.status_code == 403
        assert resp.json() == {"error": "forbidden", "detail": "Only question owner can accept answers"}

    async def test_missing_answer(self, client, register):
        alice = await register("alice")
        resp = await client.post("/api/answers/4242/accept", headers=alice["headers"])
        assert resp.status_code == 404

    async def test_accepting_another_answer_moves_the_mark(self, client, session, register, ask, answer):
        alice = await register("alice")
        bob = await register("bob")
        carol = await register("carol")
        question = await ask(alice)
        first = await answer(bob, question["id"])
        second = await answer(carol, question["id"], "Slice with [::-1].")

        await client.post(f"/api/answers/{first['id']}/accept", headers=alice["headers"])
        await client.post(f"/api/answers/{second['id']}/accept", headers=alice["headers"])
        await client.post(f"/api/answers/{second['id']}/accept", headers=alice["headers"])

        listing = await client.get(f"/api/answers/question/{question['id']}")
        accepted = [a["id"] for a in listing.json() if a["is_accepted"]]
        assert accepted == [second["id"]]
        assert await accepted_count(session, question["id"]) == 1

    async def test_accept_notifies_answer_author(self, client, register, ask, answer, inbox):
        alice = await register("alice")
        bob = await register("bob")
        question = await ask(alice, title="Reverse a list")
        ans = await answer(bob, question["id"])

        await client.post(f"/api/answers/{ans['id']}/accept", headers=alice["headers"])

        accepts = [n for n in await inbox(bob) if n["type"] == "accept"]
        assert len(accepts) == 1
        assert accepts[0]["content"] == 'accepted your answer on "Reverse a list"'
        assert accepts[0]["link"] == f"/question/{question['id']}"
        assert accepts[0]["sender"]["username"] == "alice"

    async def test_accepting_own_answer_sends_nothing(self, client, register, ask, answer, inbox):
        alice = await register("alice")
        question = await ask(alice)
        ans = await answer(alice, question["id"])

        resp = await client.post(f"/api/answers/{ans['id']}/accept", headers=alice["headers"])

        assert resp.status_code == 200
        assert await inbox(alice) == []
