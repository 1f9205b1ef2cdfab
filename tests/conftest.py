import pathlib
import sys
from typing import Any, Dict, List, Optional

import pytest
import requests

# Ensure src is on the path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / 'src'))

SAMPLES = pathlib.Path(__file__).resolve().parent / 'samples'


class FakeResponse:
    def __init__(self, text: str = '', status_code: int = 200, url: str = '',
                 headers: Optional[Dict[str, str]] = None, json_data: Any = None):
        self.text = text
        self.status_code = status_code
        self.url = url
        self.headers = headers or {}
        self._json = json_data

    @property
    def content(self) -> bytes:
        return self.text.encode('utf-8')

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error for url: {self.url}', response=self)

    def json(self):
        if self._json is None:
            raise ValueError('no JSON body')
        return self._json


class FakeSession:
    """Stands in for requests.Session; records (url, timeout) of every get."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: List[tuple] = []

    def get(self, url, timeout=None, **kwargs):
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def no_network(monkeypatch):
    def refuse(self, method, url, *args, **kwargs):
        raise RuntimeError(f'network access in tests: {method} {url}')

    monkeypatch.setattr(requests.sessions.Session, 'request', refuse)


@pytest.fixture
def samples() -> pathlib.Path:
    return SAMPLES


@pytest.fixture
def feed_xml() -> str:
    return (SAMPLES / 'swid.feed.xml').read_text(encoding='utf-8')


@pytest.fixture
def config_file(tmp_path) -> pathlib.Path:
    path = tmp_path / 'swidtag.yaml'
    path.write_text(
        'output_format: xml\n'
        'overwrite: false\n'
        'timeout: 5\n'
        'quiet: false\n'
        'environment:\n'
        '  OS: windows\n'
        '  OSVersion: "10.0"\n',
        encoding='utf-8',
    )
    return path
