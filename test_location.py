import pytest

from phplog.location import extract_location, read_snippet, real_path


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "app.php"
    path.write_text("".join(f"line {i}\n" for i in range(1, 11)))
    return path


def test_on_line_clause():
    loc = extract_location("Undefined variable in /var/www/app.php on line 42", with_snippet=False)
    assert loc.path == "/var/www/app.php"
    assert loc.line == 42
    assert loc.core == "Undefined variable"


def test_colon_clause():
    loc = extract_location("Uncaught Exception: boom in /var/www/lib/db.php:12", with_snippet=False)
    assert loc.path == "/var/www/lib/db.php"
    assert loc.line == 12
    assert loc.core == "Uncaught Exception: boom"


@pytest.mark.parametrize(
    "message",
    [
        "Table 'wp_posts' doesn't exist",
        "Undefined variable in app.php on line 42",
        "Undefined variable in /var/www/app.php on line 42 and more",
        "",
    ],
)
def test_no_location(message):
    assert extract_location(message) is None


def test_snippet_window_is_centred_on_line(source_file):
    assert read_snippet(str(source_file), 5) == "\n".join(f"{i}. line {i}" for i in range(2, 9))


def test_snippet_near_start_is_clamped(source_file):
    assert read_snippet(str(source_file), 2) == "\n".join(f"{i}. line {i}" for i in range(1, 8))


def test_snippet_near_end_is_short(source_file):
    assert read_snippet(str(source_file), 10) == "\n".join(f"{i}. line {i}" for i in range(7, 11))


def test_snippet_past_end_is_empty(source_file):
    assert read_snippet(str(source_file), 500) == ""


def test_unreadable_source_gives_empty_snippet(tmp_path):
    assert read_snippet(str(tmp_path / "missing.php"), 3) == ""
    assert read_snippet(str(tmp_path), 3) == ""


def test_location_reads_snippet(source_file):
    loc = extract_location(f"Division by zero in {source_file} on line 5")
    assert loc.snippet.splitlines()[0] == "2. line 2"
    assert loc.snippet.splitlines()[-1] == "8. line 8"


def test_virtual_path_prefix(source_file):
    message = f"Undefined index in zend.view://{source_file}:3"
    loc = extract_location(message)
    assert loc.path == f"zend.view://{source_file}"
    assert loc.core == "Undefined index"
    assert loc.snippet.splitlines()[0] == "1. line 1"


def test_real_path():
    assert real_path("zend.view:///srv/view.phtml") == "/srv/view.phtml"
    assert real_path("/srv/view.phtml") == "/srv/view.phtml"
