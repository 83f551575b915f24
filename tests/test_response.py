from unittest.mock import MagicMock, patch

import pytest
import requests

from routedoc.errors import AnnotationError
from routedoc.generator.response import ResponseResolver
from routedoc.parser.base import ApplyRules, ParameterDescriptor, ResponseCallPolicy, RouteRecord
from routedoc.parser.docblock import Tag


def _record(methods=("GET",), uri="users/{id}", policy=None, headers=None) -> RouteRecord:
    return RouteRecord(
        handler="app:C.show",
        methods=list(methods),
        uri=uri,
        apply=ApplyRules(
            headers=headers or {},
            response_calls=policy or ResponseCallPolicy(methods=["*"], base_url="http://api.test/"),
        ),
    )


def _response(status=200, text='{"id": 1}'):
    resp = MagicMock()
    resp.ok = 200 <= status < 300
    resp.status_code = status
    resp.text = text
    return resp


class TestDeclaredResponses:
    def test_response_tag(self):
        tags = [Tag(name="response", content='201 {"id": 1}')]
        (example,) = ResponseResolver().get_response(_record(), tags)
        assert example.status_code == 201
        assert example.content == '{"id": 1}'

    def test_response_tag_defaults_to_200(self):
        (example,) = ResponseResolver().get_response(_record(), [Tag(name="response", content="[]")])
        assert example.status_code == 200

    def test_invalid_json_is_an_authoring_error(self):
        with pytest.raises(AnnotationError):
            ResponseResolver().get_response(_record(), [Tag(name="response", content="{not json")])

    @patch("routedoc.generator.response.requests.request")
    def test_declared_response_skips_call(self, mock_request):
        ResponseResolver().get_response(_record(), [Tag(name="response", content="{}")])
        mock_request.assert_not_called()


class TestResponseCalls:
    @patch("routedoc.generator.response.requests.request")
    def test_probe_captures_json(self, mock_request):
        mock_request.return_value = _response()
        record = _record(headers={"Authorization": "Bearer t"})
        path = {"id": ParameterDescriptor(type="integer", value=5)}
        query = {"include": ParameterDescriptor(value="roles")}

        (example,) = ResponseResolver().get_response(record, [], path=path, query=query)

        assert example.content == '{"id": 1}'
        args, kwargs = mock_request.call_args
        assert args == ("GET", "http://api.test/users/5")
        assert kwargs["params"] == {"include": "roles"}
        assert kwargs["headers"]["Authorization"] == "Bearer t"
        assert kwargs["headers"]["Accept"] == "application/json"
        assert kwargs["json"] is None

    @patch("routedoc.generator.response.requests.request")
    def test_post_sends_body(self, mock_request):
        mock_request.return_value = _response(201)
        body = {"user.name": ParameterDescriptor(value="Ada")}
        ResponseResolver().get_response(_record(methods=("POST",), uri="users"), [], body=body)
        assert mock_request.call_args.kwargs["json"] == {"user": {"name": "Ada"}}

    @patch("routedoc.generator.response.requests.request")
    def test_bindings_win_over_parameters(self, mock_request):
        mock_request.return_value = _response()
        policy = ResponseCallPolicy(methods=["GET"], base_url="http://api.test", bindings={"{id}": "42"})
        path = {"id": ParameterDescriptor(type="integer", value=5)}
        ResponseResolver().get_response(_record(policy=policy), [], path=path)
        assert mock_request.call_args.args[1] == "http://api.test/users/42"

    @patch("routedoc.generator.response.requests.request")
    def test_method_not_allowed_by_policy(self, mock_request):
        policy = ResponseCallPolicy(methods=["GET"])
        assert ResponseResolver().get_response(_record(methods=("POST",), policy=policy), []) == []
        mock_request.assert_not_called()

    @patch("routedoc.generator.response.requests.request")
    def test_empty_policy_disables_calls(self, mock_request):
        assert ResponseResolver().get_response(_record(policy=ResponseCallPolicy()), []) == []
        mock_request.assert_not_called()

    @patch("routedoc.generator.response.requests.request")
    def test_call_skipped_when_resource_declared(self, mock_request):
        assert ResponseResolver().get_response(_record(), [], allow_call=False) == []
        mock_request.assert_not_called()

    @patch("routedoc.generator.response.requests.request")
    def test_network_error_degrades(self, mock_request):
        mock_request.side_effect = requests.ConnectionError("refused")
        assert ResponseResolver().get_response(_record(), []) == []

    @patch("routedoc.generator.response.requests.request")
    def test_timeout_degrades(self, mock_request):
        mock_request.side_effect = requests.Timeout("slow")
        assert ResponseResolver().get_response(_record(), []) == []

    @patch("routedoc.generator.response.requests.request")
    def test_non_2xx_degrades(self, mock_request):
        mock_request.return_value = _response(500)
        assert ResponseResolver().get_response(_record(), []) == []

    @patch("routedoc.generator.response.requests.request")
    def test_non_json_degrades(self, mock_request):
        mock_request.return_value = _response(text="<html>")
        assert ResponseResolver().get_response(_record(), []) == []
