import json
import threading

import pytest

from gigqa.agents import (
    default_policies,
    load_policies,
    policies_from_config,
    require_score,
    run_agents,
    select_policies,
)
from gigqa.config import ServiceConfig
from gigqa.errors import AgentOutputError


def test_default_set_has_five_personas_in_order():
    names = [p.name for p in default_policies()]
    assert names == ["very_lenient", "lenient", "neutral", "strict", "very_strict"]


def test_config_defaults_to_neutral_only():
    policies = policies_from_config(ServiceConfig())
    assert [p.name for p in policies] == ["neutral"]


def test_select_keeps_named_order_and_drops_duplicates():
    selected = select_policies(default_policies(), ["strict", "lenient", "strict"])
    assert [p.name for p in selected] == ["strict", "lenient"]


def test_select_rejects_unknown_and_empty():
    with pytest.raises(ValueError):
        select_policies(default_policies(), ["grumpy"])
    with pytest.raises(ValueError):
        select_policies(default_policies(), [])


def test_policies_load_from_json_file(tmp_path):
    path = tmp_path / "policies.json"
    path.write_text(json.dumps([
        {"name": "picky", "quality_prompt": "Be picky.", "review_prefix": "Side with the poster."},
        {"name": "kind", "display_name": "Kind", "quality_prompt": "Be kind.", "review_prefix": "Side with the worker."},
    ]))
    config = ServiceConfig(policy_file=str(path), active_policies=["kind", "picky"])

    policies = policies_from_config(config)

    assert [p.name for p in policies] == ["kind", "picky"]
    assert policies[1].display_name == "picky"
    assert policies[0].review_prefix == "Side with the worker."


def test_invalid_policy_file_is_reported(tmp_path):
    path = tmp_path / "policies.json"
    path.write_text(json.dumps([{"name": "incomplete"}]))
    with pytest.raises(ValueError):
        load_policies(str(path))


@pytest.mark.parametrize("value,expected", [(7, 7.0), (7.5, 7.5), ("8", 8.0), (1, 1.0), (10, 10.0)])
def test_require_score_accepts_numbers_in_range(value, expected):
    assert require_score("neutral", {"quality": value}, "quality") == expected


@pytest.mark.parametrize("value", [None, True, "high", 0, 11, float("nan"), [7]])
def test_require_score_rejects_unusable_values(value):
    resp = {} if value is None else {"quality": value}
    with pytest.raises(AgentOutputError):
        require_score("neutral", resp, "quality")


def test_run_agents_parallel_preserves_policy_order():
    policies = default_policies()
    gate = threading.Barrier(len(policies))

    def call(policy):
        gate.wait(timeout=5)
        return policy.name

    assert run_agents(policies, call, parallel=True) == [p.name for p in policies]


def test_run_agents_parallel_fails_fast():
    policies = default_policies()[:3]

    def call(policy):
        if policy.name == "lenient":
            raise AgentOutputError(policy.name, "quality", "missing")
        return policy.name

    with pytest.raises(AgentOutputError):
        run_agents(policies, call, parallel=True)


def test_service_config_from_env():
    config = ServiceConfig.from_env({
        "LLM_BASE_URL": "http://llm.local/v1",
        "OPENAI_API_KEY": "sk-test",
        "GIGQA_ACTIVE_POLICIES": "lenient, strict",
        "GIGQA_PARALLEL_AGENTS": "true",
        "GIGQA_MAX_TOKENS": "512",
    })
    assert config.base_url == "http://llm.local/v1"
    assert config.api_key == "sk-test"
    assert config.active_policies == ["lenient", "strict"]
    assert config.parallel_agents is True
    assert config.max_tokens == 512
    assert config.submission.max_retries == 2
