from hostel_console.commands import COMMANDS, GROUP_ORDER
from hostel_console.handlers import dispatch


def test_every_command_is_wired() -> None:
    for spec in COMMANDS:
        assert callable(getattr(dispatch, spec.handler, None)), spec.name
        assert spec.group in GROUP_ORDER


def test_command_names_are_unique() -> None:
    names = [n for spec in COMMANDS for n in (spec.name, *spec.aliases)]
    assert len(names) == len(set(names))
