from ports_live.httpd.responses import (
    error_response,
    file_response,
    html_escaped,
    listing_html,
    listing_response,
    mime_type_for,
    parent_path,
    percent_encoded_path,
    redirect_response,
    render,
    sanitized_header_value,
)


def test_html_escaped_escapes_special_characters():
    raw = "Troy & Annie <script>alert('Greendale')</script> \"Human Being\""
    assert html_escaped(raw) == (
        "Troy &amp; Annie &lt;script&gt;alert(&#x27;Greendale&#x27;)&lt;/script&gt; &quot;Human Being&quot;"
    )


def test_percent_encoded_path_encodes_unsafe_characters():
    raw = "/Greendale Community College/Senor Chang's notes.html"
    assert percent_encoded_path(raw) == "/Greendale%20Community%20College/Senor%20Chang's%20notes.html"
    assert percent_encoded_path("/<script>.html") == "/%3Cscript%3E.html"
    assert percent_encoded_path("/café/") == "/caf%C3%A9/"
    assert percent_encoded_path("/a?b#c%") == "/a%3Fb%23c%25"


def test_sanitized_header_value_removes_crlf_and_nul():
    cases = {
        "/path\r\nSet-Cookie: hijacked": "/pathSet-Cookie: hijacked",
        "/path\nLocation: evil.com": "/pathLocation: evil.com",
        "/path\rX-Injected: true": "/pathX-Injected: true",
        "/path\r\n\r\n<html>evil</html>": "/path<html>evil</html>",
        "/path\x00malicious": "/pathmalicious",
        "/normal/path": "/normal/path",
        "": "",
    }
    for raw, want in cases.items():
        assert sanitized_header_value(raw) == want


def test_mime_types():
    assert mime_type_for("index.HTML") == "text/html; charset=utf-8"
    assert mime_type_for("a/b.jpeg") == "image/jpeg"
    assert mime_type_for("notes.md") == "text/markdown; charset=utf-8"
    assert mime_type_for("archive.tar.gz") == "application/octet-stream"
    assert mime_type_for("Makefile") == "application/octet-stream"


def test_render_header_order_for_plain_body():
    assert render(200, "text/css", b"body{}") == (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-Type: text/css\r\n"
        b"Content-Length: 6\r\n"
        b"Connection: close\r\n"
        b"\r\n"
        b"body{}"
    )


def test_error_response_is_exact():
    body = b"<html><body><h1>404 Not Found</h1></body></html>"
    assert error_response(404) == (
        b"HTTP/1.1 404 Not Found\r\n"
        b"Content-Type: text/html; charset=utf-8\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"Connection: close\r\n"
        b"X-Content-Type-Options: nosniff\r\n"
        b"X-Frame-Options: DENY\r\n"
        b"\r\n" + body
    )


def test_error_statuses_have_messages():
    for status, phrase in [(400, b"Bad Request"), (403, b"Forbidden"), (405, b"Method Not Allowed"),
                           (413, b"Content Too Large"), (500, b"Internal Server Error"),
                           (503, b"Service Unavailable")]:
        raw = error_response(status)
        assert raw.startswith(b"HTTP/1.1 %d " % status + phrase + b"\r\n")
        assert phrase in raw.split(b"\r\n\r\n", 1)[1]


def test_redirect_location_is_encoded_and_scrubbed():
    raw = redirect_response("/my dir\r\nSet-Cookie: x=1/")
    head = raw.split(b"\r\n\r\n", 1)[0].decode()
    lines = head.split("\r\n")
    assert lines[0] == "HTTP/1.1 301 Moved Permanently"
    assert "Location: /my%20dir%0D%0ASet-Cookie:%20x=1/" in lines
    assert not any(line.startswith("Set-Cookie") for line in lines)
    assert "X-Frame-Options: DENY" not in lines
    assert "X-Content-Type-Options: nosniff" in lines


def test_file_response_read_failure_is_500(tmp_path):
    assert file_response(str(tmp_path / "vanished.txt")).startswith(b"HTTP/1.1 500 ")


def test_listing_escapes_names_and_encodes_links():
    page = listing_html("/sub dir/", [("<script>.html", False), ("nested", True)])
    assert "<title>Index of /sub dir/</title>" in page
    assert '<a href="/sub%20dir/%3Cscript%3E.html">&lt;script&gt;.html</a>' in page
    assert '<a href="/sub%20dir/nested/">nested/</a>' in page
    assert '<a href="/">../</a>' in page
    assert "<script>" not in page


def test_listing_root_has_no_parent_link():
    assert "../" not in listing_html("/", [("a.txt", False)])


def test_parent_path():
    assert parent_path("/a/") == "/"
    assert parent_path("/a/b/") == "/a/"


def test_listing_response_sorted_by_name(tmp_path):
    for name in ("b.txt", "A.txt", "a.txt"):
        (tmp_path / name).write_text("x")
    (tmp_path / "c").mkdir()
    raw = listing_response(str(tmp_path), "/")
    body = raw.split(b"\r\n\r\n", 1)[1].decode()
    order = [body.index(f">{n}<") for n in ("A.txt", "a.txt", "b.txt", "c/")]
    assert order == sorted(order)
    assert b"X-Frame-Options: DENY" in raw


def test_listing_response_unlistable_is_500(tmp_path):
    assert listing_response(str(tmp_path / "gone"), "/gone/").startswith(b"HTTP/1.1 500 ")
