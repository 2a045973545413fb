from __future__ import annotations

import json

import pytest

from sitecrawler import cli, core

ROOT = "https://x.com/"

PAGES = {
    ROOT: (
        '<html><head><title>Home</title>'
        '<link rel="canonical" href="/">'
        '<meta name="description" content="Start here"></head>'
        '<body><h1>Welcome</h1><a href="/about">About</a></body></html>'
    ),
    "https://x.com/about": "<html><head><title>About</title></head><body></body></html>",
}


@pytest.fixture
def fetcher(monkeypatch, fake_fetcher):
    fake = fake_fetcher(PAGES)
    monkeypatch.setattr(core, "Fetcher", lambda timeout_s, user_agent: fake)
    return fake


def test_writes_page_summaries(fetcher, tmp_path):
    out = tmp_path / "result.json"

    assert cli.main([ROOT, "--out", str(out), "--max-fetches", "5"]) == 0

    pages = json.loads(out.read_text(encoding="utf-8"))
    assert pages == [
        {"url": ROOT, "title": "Home", "h1": "Welcome", "canonical": "/", "description": "Start here"},
        {"url": "https://x.com/about", "title": "About", "h1": "", "canonical": "", "description": ""},
    ]
    assert fetcher.closed


def test_stdout_output(fetcher, capsys):
    assert cli.main([ROOT, "--out", "-", "--max-fetches", "1"]) == 0
    pages = json.loads(capsys.readouterr().out)
    assert [p["url"] for p in pages] == [ROOT]


def test_verbose_prints_summary(fetcher, tmp_path, capsys):
    cli.main([ROOT, "--out", str(tmp_path / "r.json"), "--verbose"])
    err = capsys.readouterr().err
    assert "CRAWL SUMMARY" in err
    assert "Fetches:                2" in err


def test_bad_start_url_exits_2(fetcher, capsys):
    assert cli.main(["not a url", "--out", "-"]) == 2
    assert "Invalid start URL" in capsys.readouterr().err
    assert fetcher.calls == []


def test_bad_budget_exits_2(fetcher, capsys):
    assert cli.main([ROOT, "--max-fetches", "0", "--out", "-"]) == 2
    assert "max_fetches" in capsys.readouterr().err


def test_default_output_goes_to_crawls_dir(fetcher, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert cli.main([ROOT, "--max-fetches", "1"]) == 0

    written = list((tmp_path / "crawls").glob("x_com_*.json"))
    assert len(written) == 1
    assert [p["url"] for p in json.loads(written[0].read_text(encoding="utf-8"))] == [ROOT]


def test_write_results_to_stdout_returns_no_path(capsys):
    page = cli.PageSummary(url=ROOT, title="Home", h1="", canonical="", description="")
    assert cli.write_results([page], "-", ROOT, pretty=True) is None
    assert json.loads(capsys.readouterr().out)[0]["title"] == "Home"
