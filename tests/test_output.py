import pytest

from l25c.output import CHANNELS, Listing


def test_emit_writes_to_each_named_channel():
    listing = Listing()
    listing.emit("abc", "general", "code")
    assert listing.text("general") == "abc"
    assert listing.text("code") == "abc"
    assert listing.text("table") == ""
    assert listing.text("result") == ""


def test_emit_accumulates_in_order():
    listing = Listing()
    listing.emit("first ", "result")
    listing.emit("second", "result")
    assert listing.text("result") == "first second"


def test_clear_empties_all_channels():
    listing = Listing()
    listing.emit("data", *CHANNELS)
    listing.clear()
    assert all(listing.text(name) == "" for name in CHANNELS)


def test_unknown_channel_raises():
    listing = Listing()
    with pytest.raises(ValueError):
        listing.emit("x", "bogus")
    with pytest.raises(ValueError):
        listing.text("bogus")


def test_echo_prints_once_per_emit(capsys):
    listing = Listing(echo=True)
    listing.emit("hello\n", "general", "code")
    listing.emit("console only\n")
    assert capsys.readouterr().out == "hello\nconsole only\n"


def test_no_echo_keeps_stdout_quiet(capsys):
    listing = Listing(echo=False)
    listing.emit("hidden\n", "general")
    assert capsys.readouterr().out == ""
    assert listing.text("general") == "hidden\n"