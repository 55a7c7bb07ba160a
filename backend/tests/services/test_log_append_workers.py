"""Log Appends Across Workers — verifies no chunk is lost without a shared lock.

Two BuildService instances with separate sessions and separate KeyedLocks stand
in for two worker processes. Each save is held open for a moment before commit,
so both appends overlap inside their transactions.
"""

import asyncio

from buildhub.models.build import Build
from buildhub.models.repository import Repository
from buildhub.services.build_locks import KeyedLocks
from buildhub.services.build_service import BuildService
from buildhub.services.build_store import BuildStore
from buildhub.services.notification_dispatcher import NotificationDispatcher


def _worker(session, publisher) -> BuildService:
    store = BuildStore(session)
    commit_later = store.save

    async def slow_save(build, children_attrs):
        await asyncio.sleep(0.05)
        return await commit_later(build, children_attrs)

    store.save = slow_save
    return BuildService(
        store, NotificationDispatcher(publisher, deadline_seconds=1.0), locks=KeyedLocks(),
    )


async def _seed_build(session_factory) -> int:
    async with session_factory() as db:
        repository = Repository(url="https://github.com/a/b", name="a/b", build_counter=1)
        db.add(repository)
        await db.flush()
        build = Build(repository_id=repository.id, number="1", log="$ bundle\n")
        db.add(build)
        await db.commit()
        return build.id


async def test_overlapping_appends_from_two_workers_keep_both_chunks(
    test_session_factory, publisher,
):
    build_id = await _seed_build(test_session_factory)

    async with test_session_factory() as first_db, test_session_factory() as second_db:
        first = _worker(first_db, publisher)
        second = _worker(second_db, publisher)
        await asyncio.gather(
            first.append_log(build_id, "chunk0\n"),
            second.append_log(build_id, "chunk1\n"),
        )

    async with test_session_factory() as db:
        log = (await BuildStore(db).get_build(build_id)).log
    assert log.startswith("$ bundle\n")
    assert "chunk0\n" in log
    assert "chunk1\n" in log
    assert len(log) == len("$ bundle\nchunk0\nchunk1\n")


async def test_append_to_log_concatenates_in_the_database(test_db, repository):
    build = Build(repository_id=repository.id, number="1", log="a")
    test_db.add(build)
    await test_db.commit()

    store = BuildStore(test_db)
    await store.append_to_log(build.id, "b")
    await store.append_to_log(build.id, "c")
    await test_db.commit()

    assert (await store.get_build(build.id, fresh=True)).log == "abc"
