import os
import sys
import tempfile
import unittest
from unittest import mock

import requests

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from texpaper.http_client import FetchError, build_session, fetch_text


def _response(status: int, body: bytes, url: str = "https://example.org/core.tex") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp._content = body
    return resp


class FetchTextTests(unittest.TestCase):
    def test_reads_local_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "core.tex")
            with open(path, "w", encoding="utf-8") as f:
                f.write("\\begin{document}é\\end{document}")
            self.assertEqual(fetch_text(path), "\\begin{document}é\\end{document}")

    def test_missing_local_file(self) -> None:
        with self.assertRaises(FetchError):
            fetch_text(os.path.join(tempfile.gettempdir(), "does-not-exist", "refs.bib"))

    def test_url_success_decodes_utf8(self) -> None:
        session = mock.Mock()
        session.get.return_value = _response(200, "héllo".encode("utf-8"))
        self.assertEqual(fetch_text("https://example.org/core.tex", session), "héllo")
        session.get.assert_called_once()

    def test_url_404(self) -> None:
        session = mock.Mock()
        session.get.return_value = _response(404, b"missing")
        with self.assertRaises(FetchError) as ctx:
            fetch_text("https://example.org/refs.bib", session)
        self.assertEqual(str(ctx.exception), "Request failed with status 404")

    def test_network_error(self) -> None:
        logs = []
        session = mock.Mock()
        session.get.side_effect = requests.ConnectionError("boom")
        with self.assertRaises(FetchError):
            fetch_text("https://example.org/core.tex", session, logs.append)
        self.assertTrue(any("Request failed" in line for line in logs))


class SessionTests(unittest.TestCase):
    def test_session_has_retries_and_user_agent(self) -> None:
        sess = build_session()
        self.assertIn("texpaper", sess.headers["User-Agent"])
        self.assertEqual(sess.get_adapter("https://example.org").max_retries.total, 3)


if __name__ == "__main__":
    unittest.main()
