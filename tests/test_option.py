from types import SimpleNamespace
from unittest import mock

import pytest
import responses

from apigw_kit.client import BkApiClient, OperationConfig
from apigw_kit.errors import TypeNotMatchError
from apigw_kit.operation import Operation, Request
from apigw_kit.option import PluginOption

BASE_URL = "http://api.example.com"


def _plugin_a(request):
    request.headers["X-Plugin-A"] = "a"


def _plugin_b(request):
    request.headers["X-Plugin-B"] = "b"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def option():
    return PluginOption(_plugin_a, _plugin_b)


def test_apply_to_operation(option):
    request = Request()
    operation = Operation("", mock.Mock(), request)
    operation.apply(option)
    assert operation.error is None
    assert _plugin_a in request.hooks
    assert _plugin_b in request.hooks


def test_apply_to_client(option):
    cli = BkApiClient("", SimpleNamespace(url=BASE_URL))
    assert cli.apply(option) is None
    assert _plugin_a in cli.hooks
    assert _plugin_b in cli.hooks
    assert cli.operation_options == []


def test_apply_to_wrong_client_type(option):
    with pytest.raises(TypeNotMatchError):
        option.apply_to_client(object())


def test_apply_to_wrong_operation_type(option):
    with pytest.raises(TypeNotMatchError):
        option.apply_to_operation(object())


def test_client_plugins_run_on_send(mocked, option):
    mocked.add(responses.GET, f"{BASE_URL}/x", status=200)
    cli = BkApiClient("testing", SimpleNamespace(url=BASE_URL))
    cli.apply(option)
    response = cli.new_operation(OperationConfig(path="/x")).request()
    assert response.status_code == 200
    sent = mocked.calls[0].request
    assert sent.headers["X-Plugin-A"] == "a"
    assert sent.headers["X-Plugin-B"] == "b"


def test_operation_plugins_run_on_send(mocked, option):
    mocked.add(responses.GET, f"{BASE_URL}/x", status=200)
    cli = BkApiClient("testing", SimpleNamespace(url=BASE_URL))
    response = cli.new_operation(OperationConfig(path="/x"), option).request()
    assert response.status_code == 200
    sent = mocked.calls[0].request
    assert sent.headers["X-Plugin-A"] == "a"
    assert sent.headers["X-Plugin-B"] == "b"