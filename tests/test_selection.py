import pytest

from selection import OptionNotFound, resolve_option, select_option


@pytest.fixture
def options(static_dir):
    (static_dir / "generated1.html").write_text("<html>one</html>", encoding="utf-8")
    (static_dir / "generated2.html").write_text("<html>two</html>", encoding="utf-8")
    return static_dir


def test_select_copies_into_current_slot(options):
    code = select_option(str(options), "/static/generated2.html")
    assert code == "<html>two</html>"
    assert (options / "generated.html").read_text(encoding="utf-8") == "<html>two</html>"


def test_select_overwrites_previous_selection(options):
    select_option(str(options), "/static/generated1.html")
    select_option(str(options), "/static/generated2.html")
    assert (options / "generated.html").read_text(encoding="utf-8") == "<html>two</html>"


def test_select_leaves_option_files_untouched(options):
    select_option(str(options), "generated1.html")
    assert (options / "generated1.html").read_text(encoding="utf-8") == "<html>one</html>"


@pytest.mark.parametrize("ref", [
    "/static/generated3.html",
    "/static/generated.html",
    "../../etc/passwd",
    "/static/other.html",
    "",
])
def test_unknown_reference_is_not_found(options, ref):
    with pytest.raises(OptionNotFound):
        resolve_option(str(options), ref)


def test_only_basename_is_used(options):
    path = resolve_option(str(options), "/some/where/else/generated1.html")
    assert path.endswith("generated1.html")
