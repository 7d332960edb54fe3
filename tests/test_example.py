"""Tests for the scripted multi-model demo."""

import os

from brandfinder.example import run_example

RUNS = (("gpt-4o-mini", 0, 2), ("gpt-4o", 2, 2))


def test_runs_each_model_and_compares(test_settings, results_dir, backend, completion, brand_reply, quiet_console, console_text):
    scripted = backend(
        [
            completion(brand_reply("Acme Blades", "https://acmeblades.com")),
            completion(brand_reply("NoSuchBrand", None, "low")),
            completion(brand_reply("Third Edge", "https://thirdedge.com")),
        ]
    )

    code = run_example(test_settings, runs=RUNS, transport=scripted.transport, out=quiet_console)

    assert code == 0
    assert [b["model"] for b in scripted.bodies()] == [
        "openai/gpt-4o-mini:online",
        "openai/gpt-4o-mini:online",
        "openai/gpt-4o:online",
    ]

    files = sorted(os.listdir(results_dir))
    assert len(files) == 2
    assert any(f.startswith("brand_websites_gpt-4o-mini_") for f in files)

    output = console_text()
    assert "COMPARISON SUMMARY" in output
    assert "gpt-4o-mini: 1/2 successful" in output
    assert "gpt-4o: 1/1 successful" in output


def test_missing_credential(test_settings, backend, quiet_console, console_text):
    settings = test_settings.model_copy(update={"OPENROUTER_API_KEY": None})
    scripted = backend([])

    assert run_example(settings, runs=RUNS, transport=scripted.transport, out=quiet_console) == 1
    assert "OPENROUTER_API_KEY" in console_text()
    assert scripted.requests == []
