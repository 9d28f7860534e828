import json
import math

import pytest

from completions import (
    CompletionRequest,
    RequestConstructionError,
    SerializationError,
    new_completion_request,
)


@pytest.mark.parametrize("value,expected", [(-0.5, 0.0), (0.0, 0.0), (0.3, 0.3), (1.0, 1.0), (7, 1.0)])
def test_temperature_clamped(value, expected):
    req = new_completion_request()
    req.set_temperature(value)
    assert req.temperature == expected


@pytest.mark.parametrize("value,expected", [(-1, 0.0), (0.25, 0.25), (1.5, 1.0)])
def test_top_p_clamped(value, expected):
    req = new_completion_request()
    req.set_top_p(value)
    assert req.top_p == expected


@pytest.mark.parametrize("value,expected", [(-3, 0), (0, 0), (3, 3), (5, 5), (12, 5)])
def test_logprobs_clamped(value, expected):
    req = new_completion_request()
    req.set_logprobs(value)
    assert req.logprobs == expected


@pytest.mark.parametrize("value,expected", [(-0.1, 0.0), (0.6, 0.6), (2.0, 1.0)])
def test_frequency_penalty_clamped(value, expected):
    req = new_completion_request()
    req.set_frequency_penalty(value)
    assert req.frequency_penalty == expected


@pytest.mark.parametrize("value,expected", [(-9, -2.0), (-1.5, -1.5), (1.9, 1.9), (2.5, 2.0)])
def test_presence_penalty_clamped(value, expected):
    req = new_completion_request()
    req.set_presence_penalty(value)
    assert req.presence_penalty == expected


@pytest.mark.parametrize("value,expected", [(-4, 1), (0, 1), (1, 1), (3, 3)])
def test_best_of_floored(value, expected):
    req = new_completion_request()
    req.set_best_of(value)
    assert req.best_of == expected


def test_plain_setters_assign():
    req = new_completion_request()
    req.set_model("davinci")
    req.set_prompt("Hi")
    req.set_user("user-1")
    req.set_echo(True)
    req.set_stream(True)
    req.set_max_tokens(200)
    req.set_completions(3)
    assert (req.model, req.prompt, req.user) == ("davinci", "Hi", "user-1")
    assert req.echo is True and req.stream is True
    assert req.max_tokens == 200
    assert req.completions == 3


def test_bias_saturates():
    req = new_completion_request()
    req.add_bias("tok", 150)
    assert req.logit_bias == {"tok": 100}
    req.remove_bias("tok", 300)
    assert req.logit_bias == {"tok": -100}


def test_bias_adjusts_within_range():
    req = new_completion_request()
    req.add_bias("a", 10)
    req.add_bias("a", 15)
    assert req.logit_bias["a"] == 25
    req.remove_bias("a", 5)
    assert req.logit_bias["a"] == 20


def test_remove_bias_keeps_entry_and_clamps_unseen():
    req = new_completion_request()
    req.remove_bias("x", 250)
    assert req.logit_bias == {"x": 100}
    req.remove_bias("x", 100)
    assert req.logit_bias == {"x": 0}


def test_default_request_values():
    req = new_completion_request()
    assert req.url == "https://api.openai.com/v1/completions"
    assert req.model == "text-davinci-003"
    assert req.prompt == ""
    assert req.stop == ["User:"]
    assert req.max_tokens == 16
    assert req.completions == 1
    assert req.temperature == 1
    assert req.top_p == 1
    assert req.logprobs == 0
    assert req.echo is False
    assert req.best_of == 1
    assert req.frequency_penalty == 0
    assert req.presence_penalty == 0
    assert req.logit_bias is None
    assert req.stream is False
    assert req.user == ""


def test_make_default_resets_but_keeps_bearer():
    req = new_completion_request()
    req.set_bearer("secret")
    req.set_prompt("p")
    req.add_bias("t", 5)
    req.add_stop("Human:")
    req.url = "http://localhost:9999/v1/completions"
    req.make_default()
    assert req == CompletionRequest(bearer="secret")


def test_constructor_values_are_clamped():
    req = CompletionRequest(temperature=3, logprobs=-1, best_of=0, logit_bias={"a": 500})
    assert req.temperature == 1.0
    assert req.logprobs == 0
    assert req.best_of == 1
    assert req.logit_bias == {"a": 100}


def test_stop_order_preserved():
    req = new_completion_request()
    req.stop = None
    req.add_stop("User:")
    req.add_stop("Human:")
    assert req.to_payload()["stop"] == ["User:", "Human:"]


def test_payload_round_trip():
    req = new_completion_request()
    req.set_prompt("Hello")
    req.set_max_tokens(60)
    req.set_temperature(0.9)
    req.set_frequency_penalty(0.6)

    body = json.loads(req.to_json())
    assert body["prompt"] == "Hello"
    assert body["max_tokens"] == 60
    assert body["temperature"] == 0.9
    assert body["frequency_penalty"] == 0.6
    assert body["stop"] == ["User:"]
    assert body["n"] == 1
    assert "logit_bias" not in body
    assert "url" not in body and "bearer" not in body
    assert list(body) == [
        "model", "prompt", "stop", "max_tokens", "n", "temperature", "top_p",
        "logprobs", "echo", "best_of", "frequency_penalty", "presence_penalty",
        "user", "stream",
    ]


def test_empty_stop_and_bias_omitted():
    req = new_completion_request()
    req.stop = []
    req.logit_bias = {}
    payload = req.to_payload()
    assert "stop" not in payload
    assert "logit_bias" not in payload


def test_get_request_headers_and_body():
    req = new_completion_request()
    req.set_bearer("tok-123")
    req.add_bias("50256", -100)

    prepared = req.get_request()
    assert prepared.method == "POST"
    assert prepared.url == "https://api.openai.com/v1/completions"
    assert prepared.headers["Content-Type"] == "application/json"
    assert prepared.headers["Authorization"] == "Bearer tok-123"
    assert json.loads(prepared.body)["logit_bias"] == {"50256": -100}


@pytest.mark.parametrize("url", ["not a url", "example.com/v1/completions", "http://"])
def test_invalid_url_raises(url):
    req = new_completion_request()
    req.url = url
    with pytest.raises(RequestConstructionError):
        req.get_request()


def test_nan_rejected_by_setters():
    req = new_completion_request()
    for setter in (req.set_temperature, req.set_top_p, req.set_frequency_penalty, req.set_presence_penalty):
        with pytest.raises(ValueError):
            setter(math.nan)
    assert 0 <= req.temperature <= 1
    assert 0 <= req.top_p <= 1
    with pytest.raises(ValueError):
        req.add_bias("tok", math.nan)
    with pytest.raises(ValueError):
        CompletionRequest(temperature=math.nan)


def test_nan_cannot_be_serialized():
    req = new_completion_request()
    req.temperature = math.nan
    with pytest.raises(SerializationError):
        req.to_json()


def test_wrong_type_cannot_be_serialized():
    req = new_completion_request()
    req.add_stop(object())
    with pytest.raises(SerializationError):
        req.get_request()


def test_update_goes_through_setters():
    req = new_completion_request()
    req.update(prompt="Hi", n=2, temperature=4, logprobs=9, stop=["Human:"], logit_bias={"a": 300})
    assert req.prompt == "Hi"
    assert req.completions == 2
    assert req.temperature == 1.0
    assert req.logprobs == 5
    assert req.stop == ["User:", "Human:"]
    assert req.logit_bias == {"a": 100}


def test_update_rejects_unknown_parameter():
    with pytest.raises(ValueError):
        new_completion_request().update(bogus=1)


def test_update_accepts_single_stop_string():
    req = new_completion_request()
    req.update(stop="Human:")
    assert req.stop == ["User:", "Human:"]
    assert req.to_payload()["stop"] == ["User:", "Human:"]
