import textwrap

import anyio
import pytest

import actorgen
from actorgen import InvalidMessageType, MailboxClosed, ReplyTimeout, SendFailed

pytestmark = pytest.mark.anyio

CRASH_SOURCE = textwrap.dedent(
    """
    from dataclasses import dataclass


    class CrashMsg:
        @dataclass
        class Get:
            resp: int

        @dataclass
        class Fail:
            resp: None


    @dataclass
    class Crash:
        async def process(self, msg):
            match msg:
                case CrashMsg.Fail():
                    raise RuntimeError("boom")
                case CrashMsg.Get():
                    msg.resp.send(1)
    """
)


class RecordingExecutor:
    """Task-group wrapper that keeps the spawned state objects for inspection."""

    def __init__(self, tg) -> None:
        self.tg = tg
        self.states = []

    def start_soon(self, func, *args, name=None) -> None:
        self.states.append(func.__self__)
        self.tg.start_soon(func, *args, name=name)


class DeferredExecutor:
    """Holds dispatch loops back until `start` and records how they failed."""

    def __init__(self) -> None:
        self.pending = []
        self.errors = []

    def start_soon(self, func, *args, name=None) -> None:
        self.pending.append(func)

    async def run(self, func) -> None:
        try:
            await func()
        except RuntimeError as e:
            self.errors.append(e)

    def start(self, tg) -> None:
        for func in self.pending:
            tg.start_soon(self.run, func)


def test_generated_module_exposes_the_handle(foo):
    assert issubclass(foo.ActorFoo, actorgen.ActorHandle)
    assert foo.FooMsg.Get(key="a").resp is None
    assert "resp" not in repr(foo.FooMsg.Get(key="a"))


async def test_round_trip_returns_the_handler_reply(foo):
    async with anyio.create_task_group() as tg:
        with foo.ActorFoo.new(tg) as actor:
            assert await actor.set(foo.FooMsg.Set(key="a", val=3)) is None
            assert await actor.get(foo.FooMsg.Get(key="a")) == 3
            assert await actor.get(foo.FooMsg.Get(key="missing")) == 0


async def test_constructor_uses_the_executor(foo):
    async with anyio.create_task_group() as tg:
        executor = RecordingExecutor(tg)
        assert isinstance(executor, actorgen.Executor)

        with foo.ActorFoo.new(executor, data={"a": 1}) as actor:
            assert await actor.get(foo.FooMsg.Get(key="a")) == 1

    (state,) = executor.states
    assert isinstance(state, foo.Foo)
    assert state.history == [("get", "a")]


async def test_wrong_variant_is_rejected_before_sending(foo):
    sender, receiver = actorgen.mailbox()
    actor = foo.ActorFoo(sender)

    with pytest.raises(InvalidMessageType) as exc:
        await actor.get(foo.FooMsg.Set(key="a", val=1))
    with pytest.raises(InvalidMessageType):
        await actor.set_no_wait(foo.FooMsg.Get(key="a"))

    assert exc.value.expected is foo.FooMsg.Get
    with pytest.raises(anyio.WouldBlock):
        receiver.receive_nowait()

    actor.close()
    receiver.close()


async def test_fire_and_forget_returns_after_enqueue(foo):
    sender, receiver = actorgen.mailbox()
    actor = foo.ActorFoo(sender)

    message = foo.FooMsg.Set(key="a", val=1)
    assert await actor.set_no_wait(message) is None

    assert receiver.receive_nowait() is message
    assert message.resp is None

    actor.close()
    receiver.close()


async def test_messages_from_one_producer_are_handled_in_order(foo):
    async with anyio.create_task_group() as tg:
        executor = RecordingExecutor(tg)
        with foo.ActorFoo.new(executor) as actor:
            for value in range(10):
                await actor.set_no_wait(foo.FooMsg.Set(key="k", val=value))
            assert await actor.get(foo.FooMsg.Get(key="k")) == 9

    history = executor.states[0].history
    assert history == [("set", "k", v) for v in range(10)] + [("get", "k")]


async def test_worker_stops_when_every_handle_is_closed(foo):
    async with anyio.create_task_group() as tg:
        executor = RecordingExecutor(tg)
        actor = foo.ActorFoo.new(executor)
        other = actor.clone()

        actor.close()
        assert await other.get(foo.FooMsg.Get(key="a")) == 0

        other.close()

    # The task group only exits once the dispatch loop has returned.
    assert executor.states[0].history == [("get", "a")]


async def test_send_after_worker_stopped_fails(foo):
    sender, receiver = actorgen.mailbox()
    actor = foo.ActorFoo(sender)
    receiver.close()

    with pytest.raises(SendFailed):
        await actor.get(foo.FooMsg.Get(key="a"))
    with pytest.raises(SendFailed):
        await actor.get_no_wait(foo.FooMsg.Get(key="a"))

    actor.close()


async def test_closed_handle_cannot_send(foo):
    sender, receiver = actorgen.mailbox()
    actor = foo.ActorFoo(sender)
    actor.close()

    with pytest.raises(SendFailed):
        await actor.set_no_wait(foo.FooMsg.Set(key="a", val=1))

    receiver.close()


async def test_unanswered_request_yields_mailbox_closed(foo):
    async with anyio.create_task_group() as tg:
        with foo.ActorFoo.new(tg) as actor:
            with pytest.raises(MailboxClosed):
                await actor.forget(foo.FooMsg.Forget(key="a"))

            # The actor is still running afterwards.
            assert await actor.get(foo.FooMsg.Get(key="a")) == 0


async def test_in_flight_request_fails_when_the_worker_drops_it(foo):
    sender, receiver = actorgen.mailbox()
    actor = foo.ActorFoo(sender)
    outcome = []

    async def call() -> None:
        try:
            await actor.get(foo.FooMsg.Get(key="a"))
        except MailboxClosed:
            outcome.append("closed")

    async with anyio.create_task_group() as tg:
        tg.start_soon(call)
        await anyio.wait_all_tasks_blocked()

        assert actorgen.drain_mailbox(receiver, "resp") == 1

    assert outcome == ["closed"]
    actor.close()
    receiver.close()


async def test_round_trip_timeout(foo):
    async with anyio.create_task_group() as tg:
        executor = RecordingExecutor(tg)
        with foo.ActorFoo.new(executor) as actor:
            with pytest.raises(ReplyTimeout):
                await actor.hold(foo.FooMsg.Hold(), timeout=0.05)

            # The worker is unaffected by the abandoned call.
            (slot,) = executor.states[0].held
            assert slot.send(1) is False
            assert await actor.get(foo.FooMsg.Get(key="a")) == 0


async def test_deferred_reply(foo):
    async with anyio.create_task_group() as tg:
        executor = RecordingExecutor(tg)
        with foo.ActorFoo.new(executor) as actor:
            result = []

            async def call() -> None:
                result.append(await actor.hold(foo.FooMsg.Hold()))

            tg.start_soon(call)
            await anyio.wait_all_tasks_blocked()

            (slot,) = executor.states[0].held
            assert slot.send(42) is True
            await anyio.wait_all_tasks_blocked()

            assert result == [42]


async def test_variant_subclass_is_a_different_tag(foo):
    class GetAll(foo.FooMsg.Get):
        pass

    sender, receiver = actorgen.mailbox()
    actor = foo.ActorFoo(sender)

    with pytest.raises(InvalidMessageType):
        await actor.get(GetAll(key="a"))
    with pytest.raises(InvalidMessageType):
        await actor.get_no_wait(GetAll(key="a"))

    with pytest.raises(anyio.WouldBlock):
        receiver.receive_nowait()
    actor.close()
    receiver.close()


async def test_failed_send_closes_the_installed_slot(foo):
    sender, receiver = actorgen.mailbox()
    actor = foo.ActorFoo(sender)
    receiver.close()
    message = foo.FooMsg.Get(key="a")

    with pytest.raises(SendFailed):
        await actor.get(message)

    assert message.resp.used
    actor.close()


async def test_failing_handler_stops_the_actor(load_generated):
    crash = load_generated(CRASH_SOURCE)
    executor = DeferredExecutor()
    actor = crash.ActorCrash.new(executor)
    closed = []

    async def call(name, message) -> None:
        try:
            await getattr(actor, name)(message)
        except MailboxClosed:
            closed.append(name)

    async with anyio.create_task_group() as tg:
        tg.start_soon(call, "fail", crash.CrashMsg.Fail())
        await anyio.wait_all_tasks_blocked()
        tg.start_soon(call, "get", crash.CrashMsg.Get())
        await anyio.wait_all_tasks_blocked()

        # Both requests are queued before the worker takes the first one.
        executor.start(tg)

    assert sorted(closed) == ["fail", "get"]
    assert [str(e) for e in executor.errors] == ["boom"]

    with pytest.raises(SendFailed):
        await actor.get_no_wait(crash.CrashMsg.Get())
    actor.close()
