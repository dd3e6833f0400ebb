from __future__ import annotations

from typing import Callable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from exchangerates.core.config import Settings
from exchangerates.main import create_app
from exchangerates.services.rates.parser import parse_dataset

# Newest first, like the real feed. GBP is missing on 2024-01-02 and HRK only
# appears on 2024-01-03.
SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<gesmes:Envelope xmlns:gesmes="http://www.gesmes.org/xml/2002-08-01" xmlns="http://www.ecb.int/vocabulary/2002-08-01/eurofxref">
  <gesmes:subject>Reference rates</gesmes:subject>
  <gesmes:Sender>
    <gesmes:name>European Central Bank</gesmes:name>
  </gesmes:Sender>
  <Cube>
    <Cube time="2024-01-05">
      <Cube currency="USD" rate="1.0921"/>
      <Cube currency="JPY" rate="158.19"/>
      <Cube currency="GBP" rate="0.8603"/>
    </Cube>
    <Cube time="2024-01-04">
      <Cube currency="USD" rate="1.0953"/>
      <Cube currency="JPY" rate="158.05"/>
      <Cube currency="GBP" rate="0.8614"/>
    </Cube>
    <Cube time="2024-01-03">
      <Cube currency="USD" rate="1.0919"/>
      <Cube currency="JPY" rate="155.81"/>
      <Cube currency="GBP" rate="0.8630"/>
      <Cube currency="HRK" rate="7.5345"/>
    </Cube>
    <Cube time="2024-01-02">
      <Cube currency="USD" rate="1.0956"/>
      <Cube currency="JPY" rate="155.71"/>
    </Cube>
  </Cube>
</gesmes:Envelope>
"""


@pytest.fixture
def sample_xml() -> str:
    return SAMPLE_XML


@pytest.fixture
def dataset():
    return parse_dataset(SAMPLE_XML)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=tmp_path,
        update_enabled=False,
        http_retries=0,
        http_backoff_seconds=0,
        log_json=False,
        dataset_url="https://mock.ecb/eurofxref-hist.xml",
    )


@pytest.fixture
def recording_transport() -> Callable[..., httpx.MockTransport]:
    """Build a MockTransport answering with the given (status, body) pairs in turn."""

    def build(*responses, calls: List[httpx.Request] | None = None) -> httpx.MockTransport:
        queue = list(responses)

        def handler(request: httpx.Request) -> httpx.Response:
            if calls is not None:
                calls.append(request)
            status, body = queue.pop(0) if len(queue) > 1 else queue[0]
            return httpx.Response(status, text=body)

        return httpx.MockTransport(handler)

    return build


@pytest.fixture
def client(settings, dataset) -> TestClient:
    # no context manager: the dataset is preloaded so startup work is not needed
    return TestClient(create_app(settings, dataset=dataset))
