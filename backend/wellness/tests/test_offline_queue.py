import anyio
import pytest

from wellness.client.offline_queue import OfflineQueue
from wellness.client.storage import FileStorage, MemoryStorage
from wellness.core.errors import AuthError, NetworkError, StorageError, ValidationError
from wellness.models.assessment import AssessmentSubmission, MiddleEastRegion

pytestmark = pytest.mark.asyncio


class Recorder:
    """submit_fn that records sleep_hours (used as an item tag) and fails on demand."""

    def __init__(self, failures=None):
        self.failures = failures or {}
        self.seen = []

    async def __call__(self, submission):
        tag = int(submission.sleep_hours)
        self.seen.append(tag)
        if tag in self.failures:
            raise self.failures[tag]
        return tag


class BrokenWrites(MemoryStorage):
    def __init__(self):
        super().__init__()
        self.broken = False

    def set(self, key, value):
        if self.broken:
            raise StorageError("disk full")
        super().set(key, value)

    def remove(self, key):
        if self.broken:
            raise StorageError("disk full")
        super().remove(key)


async def _fill(queue, submission_factory, n=5):
    for tag in range(1, n + 1):
        await queue.enqueue(submission_factory(sleep_hours=tag))


async def _tags(queue):
    return [int(item.submission.sleep_hours) for item in await queue.pending()]


async def test_drain_all_succeeding(submission_factory):
    queue = OfflineQueue(MemoryStorage())
    await _fill(queue, submission_factory)
    submit = Recorder()

    result = await queue.drain(submit)

    assert (result.synced, result.remaining, result.dropped) == (5, 0, 0)
    assert submit.seen == [1, 2, 3, 4, 5]
    assert await queue.count() == 0


async def test_network_failure_keeps_rest_in_order(submission_factory):
    queue = OfflineQueue(MemoryStorage())
    await _fill(queue, submission_factory)
    submit = Recorder({3: NetworkError("timeout")})

    result = await queue.drain(submit)

    assert result.synced == 2
    assert result.remaining == 3
    assert submit.seen == [1, 2, 3]
    assert await _tags(queue) == [3, 4, 5]


async def test_rejected_item_is_dropped_and_drain_continues(submission_factory):
    queue = OfflineQueue(MemoryStorage())
    await _fill(queue, submission_factory)
    submit = Recorder({3: ValidationError("missing answers", missing=["q9"])})

    result = await queue.drain(submit)

    assert submit.seen == [1, 2, 3, 4, 5]
    assert (result.synced, result.remaining, result.dropped) == (4, 0, 1)
    assert await queue.count() == 0


async def test_auth_failure_keeps_items_and_propagates(submission_factory):
    queue = OfflineQueue(MemoryStorage())
    await _fill(queue, submission_factory, n=3)
    submit = Recorder({2: AuthError("expired")})

    with pytest.raises(AuthError):
        await queue.drain(submit)

    assert await _tags(queue) == [2, 3]


async def test_items_enqueued_during_drain_are_kept(submission_factory):
    queue = OfflineQueue(MemoryStorage())
    await _fill(queue, submission_factory, n=2)

    async def submit(submission):
        if submission.sleep_hours == 1:
            await queue.enqueue(submission_factory(sleep_hours=9))
        if submission.sleep_hours == 2:
            raise NetworkError("offline again")

    result = await queue.drain(submit)

    assert result.synced == 1
    assert await _tags(queue) == [2, 9]
    assert result.remaining == 2


async def test_failed_write_leaves_previous_queue_untouched(submission_factory):
    storage = BrokenWrites()
    queue = OfflineQueue(storage)
    await _fill(queue, submission_factory, n=3)
    storage.broken = True

    with pytest.raises(StorageError):
        await queue.drain(Recorder())
    with pytest.raises(StorageError):
        await queue.enqueue(submission_factory(sleep_hours=7))

    storage.broken = False
    assert await _tags(queue) == [1, 2, 3]


async def test_file_backed_queue_survives_restart(tmp_path, submission_factory):
    first = OfflineQueue(FileStorage(tmp_path))
    await first.enqueue(submission_factory(sleep_hours=4, q8=True))

    second = OfflineQueue(FileStorage(tmp_path))
    pending = await second.pending()
    assert len(pending) == 1
    assert pending[0].submission.responses["q8"] is True
    assert pending[0].queued_at.tzinfo is not None

    await second.drain(Recorder())
    assert not list(tmp_path.glob("*.json"))


async def test_corrupted_blob_is_a_storage_error(tmp_path):
    (tmp_path / "offline_queue.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        await OfflineQueue(FileStorage(tmp_path)).count()


async def test_concurrent_enqueues_are_not_lost(submission_factory):
    queue = OfflineQueue(MemoryStorage())
    async with anyio.create_task_group() as tg:
        for tag in range(10):
            tg.start_soon(queue.enqueue, submission_factory(sleep_hours=tag))
    assert await queue.count() == 10


async def test_middle_east_region_survives_restart(tmp_path):
    submission = AssessmentSubmission(
        stage="Third Trimester",
        region=MiddleEastRegion(country="Jordan"),
        sleep_hours=5,
        responses={"q1": True},
    )
    await OfflineQueue(FileStorage(tmp_path)).enqueue(submission)

    pending = await OfflineQueue(FileStorage(tmp_path)).pending()

    assert isinstance(pending[0].submission.region, MiddleEastRegion)
    assert pending[0].submission.region.country == "Jordan"
    assert pending[0].submission == submission


async def test_drain_only_replays_the_owners_items(submission_factory):
    queue = OfflineQueue(MemoryStorage())
    await queue.enqueue(submission_factory(sleep_hours=1), owner_id="alice")
    await queue.enqueue(submission_factory(sleep_hours=2), owner_id="bob")
    await queue.enqueue(submission_factory(sleep_hours=3))
    await queue.enqueue(submission_factory(sleep_hours=4), owner_id="alice")
    submit = Recorder()

    result = await queue.drain(submit, owner_id="bob")

    assert submit.seen == [2, 3]
    assert (result.synced, result.remaining) == (2, 2)
    assert await _tags(queue) == [1, 4]
    assert [item.owner_id for item in await queue.pending()] == ["alice", "alice"]


async def test_halt_keeps_foreign_items_in_order(submission_factory):
    queue = OfflineQueue(MemoryStorage())
    await queue.enqueue(submission_factory(sleep_hours=1), owner_id="alice")
    await queue.enqueue(submission_factory(sleep_hours=2), owner_id="bob")
    await queue.enqueue(submission_factory(sleep_hours=3), owner_id="alice")

    await queue.drain(Recorder({2: NetworkError("down")}), owner_id="bob")

    assert await _tags(queue) == [1, 2, 3]
