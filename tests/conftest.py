import dataclasses
import itertools
import sys
import textwrap
import types

import pytest
from sayer.testing import SayerTestClient

from actorgen import monkay
from actorgen.cli.app import app
from actorgen.synthesis import SynthesisOptions, synthesize_source

FOO_SOURCE = textwrap.dedent(
    '''
    """Key/value store actor."""
    from dataclasses import dataclass, field


    def reply(msg, value):
        if msg.resp is not None:
            msg.resp.send(value)


    class FooMsg:
        @dataclass
        class Get:
            key: str
            resp: int

        @dataclass
        class Set:
            key: str
            val: int
            resp: None

        @dataclass
        class Forget:
            key: str
            resp: None

        @dataclass
        class Hold:
            resp: int

        class Ping:
            pass


    @dataclass
    class Foo:
        data: dict[str, int] = field(default_factory=dict)
        history: list = field(default_factory=list)
        held: list = field(default_factory=list)

        async def process(self, msg):
            match msg:
                case FooMsg.Get(key=key):
                    self.history.append(("get", key))
                    reply(msg, self.data.get(key, 0))
                case FooMsg.Set(key=key, val=val):
                    self.history.append(("set", key, val))
                    self.data[key] = val
                    reply(msg, None)
                case FooMsg.Forget(key=key):
                    self.history.append(("forget", key))
                case FooMsg.Hold():
                    self.held.append(msg.resp)
                    msg.resp = None
    '''
)

_module_ids = itertools.count()


@pytest.fixture(scope="module")
def anyio_backend():
    return ("asyncio", {"debug": True})


@pytest.fixture()
def settings():
    """Expose the live settings and restore them after the test."""
    current = monkay.settings
    saved = dataclasses.asdict(current)
    yield current
    for name, value in saved.items():
        setattr(current, name, value)


@pytest.fixture()
def foo_source() -> str:
    return FOO_SOURCE


@pytest.fixture()
def load_generated():
    """Synthesize a source string and import the result as a real module."""
    loaded: list[str] = []

    def load(source: str, **options) -> types.ModuleType:
        code = synthesize_source(source, options=SynthesisOptions(**options))
        name = f"actorgen_generated_{next(_module_ids)}"
        module = types.ModuleType(name)
        module.__generated_source__ = code
        sys.modules[name] = module
        loaded.append(name)
        exec(compile(code, name, "exec"), module.__dict__)
        return module

    yield load

    for name in loaded:
        sys.modules.pop(name, None)


@pytest.fixture()
def foo(load_generated) -> types.ModuleType:
    return load_generated(FOO_SOURCE)


@pytest.fixture()
def cli(settings) -> SayerTestClient:
    return SayerTestClient(app)
