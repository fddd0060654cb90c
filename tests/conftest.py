import json
from collections import deque

import httpx
import pytest

from kieai import KieAI, RetryConfig, SDKConfig
from kieai.core.http.client import HttpClient

API_KEY = "test-key"
BASE_URL = "https://api.test.kie.ai"

JOBS_CREATE = "/api/v1/jobs/createTask"
JOBS_RECORD = "/api/v1/jobs/recordInfo"


def envelope(data=None, code=200, msg="success"):
    return {"code": code, "msg": msg, "data": data}


def job_record(task_id="T1", state="generating", model="x", **extra):
    record = {
        "taskId": task_id,
        "model": model,
        "state": state,
        "param": json.dumps({"prompt": "a cat"}),
        "resultJson": None,
        "failCode": None,
        "failMsg": None,
        "createTime": 1700000000000,
    }
    record.update(extra)
    return envelope(record)


def flag_record(task_id="F1", flag=0, result_field="response", result=None, **extra):
    record = {
        "taskId": task_id,
        "paramJson": json.dumps({"prompt": "a fox"}),
        "successFlag": flag,
        result_field: result,
        "errorCode": None,
        "errorMessage": None,
        "createTime": 1700000000000,
    }
    record.update(extra)
    return envelope(record)


class StubAPI:
    """Scripted stand-in for the remote service.

    Responses are queued per ``(method, path)``; the last queued response
    is repeated once the others are used up.  A queued item may be a JSON
    body (served with HTTP 200), an ``httpx.Response``, an exception to
    raise, or a callable taking the request.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, *responses):
        self.routes.setdefault((method, path), deque()).extend(responses)
        return self

    def __call__(self, request):
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json=envelope(code=404, msg="no route"))
        item = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        if callable(item):
            return item(request)
        return httpx.Response(200, json=item)

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def body(request):
        return json.loads(request.content)


@pytest.fixture
def stub_api():
    return StubAPI()


@pytest.fixture
def transport(stub_api):
    return httpx.MockTransport(stub_api)


@pytest.fixture
def config():
    return SDKConfig(
        api_key=API_KEY,
        base_url=BASE_URL,
        retry=RetryConfig(max_retries=2, retry_delay=0),
    )


@pytest.fixture
async def http_client(config, transport):
    client = HttpClient(config, transport=transport)
    yield client
    await client.aclose()


@pytest.fixture
async def sdk(config, transport):
    client = KieAI(config, transport=transport)
    yield client
    await client.dispose()
