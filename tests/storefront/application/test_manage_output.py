"""Console rendering of the management CLI's translation report."""

from manage import _error_table, console


def test_failed_records_render_as_a_table():
    errors = [
        {"id": "p-1", "error": "{'description': ['Value too long']}"},
        {"id": "p-2", "error": "Provider timed out"},
    ]

    with console.capture() as capture:
        console.print(_error_table("products", errors))
    output = capture.get()

    assert "Untranslated products" in output
    assert "p-1" in output
    assert "['Value too long']" in output
    assert "Provider timed out" in output
