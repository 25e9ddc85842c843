import pytest

INDEX = b"<html><body>index</body></html>\n"


@pytest.fixture
def webroot(tmp_path):
    root = tmp_path / "webapp"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX)
    (root / "home.html").write_bytes(b"<p>home</p>")
    (root / "css").mkdir()
    (root / "css" / "style.css").write_bytes(b"body { color: red; }")
    (root / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n" + bytes(range(256)))
    (tmp_path / "secret.txt").write_bytes(b"top secret")
    return root
