"""Tests for whitelist-first retrieval."""

import pytest

from cgt_engine.config.policy import DomainPolicy
from cgt_engine.retrieval.retriever import WebRetriever, merge_by_url, search_key

from conftest import FakeSearchClient, MemoryCache, make_candidate, make_hit

Q = "1주택 비과세"


async def test_whitelist_sufficient_skips_open_web(policy):
    client = FakeSearchClient(
        restricted={Q: [make_hit(f"https://www.nts.go.kr/{i}") for i in range(4)]},
        open_web={Q: [make_hit("https://blog.example.com/1")]},
    )
    results = await WebRetriever(client, policy).search(Q)
    assert len(results) == 4
    assert len(client.calls) == 1
    call = client.calls[0]
    assert set(call["sites"]) == set(policy.whitelist)
    assert call["num"] == policy.initial_n
    assert call["date_restrict"] == "y1"
    assert all(r.tier_priority == 1 and r.domain == "nts.go.kr" for r in results)


async def test_thin_whitelist_expands_and_merges(policy):
    client = FakeSearchClient(
        restricted={Q: [make_hit("https://www.hometax.go.kr/a"), make_hit("https://law.go.kr/b")]},
        open_web={
            Q: [
                make_hit("https://law.go.kr/b"),
                make_hit("https://blog.example.com/1"),
                make_hit("https://news.example.com/2"),
                make_hit("https://cafe.example.com/3"),
                make_hit("https://wiki.example.com/4"),
            ]
        },
    )
    results = await WebRetriever(client, policy).search(Q)
    assert [r.url for r in results] == [
        "https://www.hometax.go.kr/a",
        "https://law.go.kr/b",
        "https://blog.example.com/1",
        "https://news.example.com/2",
        "https://cafe.example.com/3",
    ]
    assert len(client.calls) == 2
    assert client.calls[1]["sites"] is None
    assert client.calls[1]["num"] == policy.expand_n


async def test_expand_flag_forces_open_web(policy):
    client = FakeSearchClient(
        restricted={Q: [make_hit(f"https://www.nts.go.kr/{i}") for i in range(4)]},
        open_web={Q: [make_hit("https://blog.example.com/1")]},
    )
    results = await WebRetriever(client, policy).search(Q, expand=True)
    assert len(client.calls) == 2
    assert results[-1].tier_priority == 5


async def test_zero_results_is_valid(policy):
    results = await WebRetriever(FakeSearchClient(), policy).search(Q)
    assert results == []


async def test_primary_failure_propagates(policy):
    client = FakeSearchClient(fail_on=[Q])
    with pytest.raises(RuntimeError):
        await WebRetriever(client, policy).search(Q)


async def test_hits_without_link_dropped(policy):
    client = FakeSearchClient(
        restricted={Q: [{"title": "no link", "snippet": ""}] + [make_hit(f"https://nts.go.kr/{i}") for i in range(3)]}
    )
    results = await WebRetriever(client, policy).search(Q)
    assert len(results) == 3


async def test_search_expanded_isolates_failures(policy):
    client = FakeSearchClient(
        restricted={
            f"{Q} 계산기 자동계산": [make_hit("https://www.hometax.go.kr/calc")],
            f"{Q} 2025년 개정": [make_hit("https://korea.kr/news"), make_hit("https://www.hometax.go.kr/calc")],
            f"{Q} 양도소득세": [make_hit("https://www.nts.go.kr/guide")],
        },
        fail_on=[f"{Q} 판례 2025"],
    )
    results = await WebRetriever(client, policy).search_expanded(Q, 2025)
    assert [r.url for r in results] == [
        "https://www.hometax.go.kr/calc",
        "https://korea.kr/news",
        "https://www.nts.go.kr/guide",
    ]
    assert len(client.calls) == 4
    sites_by_query = {c["query"]: c["sites"] for c in client.calls}
    assert sites_by_query[f"{Q} 계산기 자동계산"] == ["hometax.go.kr", "nts.go.kr"]
    assert set(sites_by_query[f"{Q} 양도소득세"]) == set(policy.whitelist)


async def test_fast_search_single_small_pass():
    policy = DomainPolicy(initial_n=10)
    client = FakeSearchClient(restricted={Q: [make_hit(f"https://nts.go.kr/{i}") for i in range(8)]})
    results = await WebRetriever(client, policy).fast_search(Q)
    assert len(results) == 5
    assert client.calls[0]["num"] == 5


def test_merge_by_url_first_wins(policy):
    a = make_candidate("https://a.com/1", "first", policy=policy)
    b = make_candidate("https://a.com/1", "second", policy=policy)
    c = make_candidate("https://c.com/1", policy=policy)
    merged = merge_by_url([a], [b, c])
    assert [m.title for m in merged] == ["first", "https://c.com/1"]


async def test_search_results_cached_for_search_ttl(policy):
    client = FakeSearchClient(restricted={Q: [make_hit(f"https://www.nts.go.kr/{i}") for i in range(4)]})
    cache = MemoryCache()
    retriever = WebRetriever(client, policy, cache=cache)

    first = await retriever.search(Q)
    second = await retriever.search(Q)

    assert [r.url for r in second] == [r.url for r in first]
    assert len(client.calls) == 1
    assert cache.set_calls[0][1] == policy.cache.search_hours == 6


async def test_refresh_bypasses_search_cache(policy):
    client = FakeSearchClient(restricted={Q: [make_hit(f"https://www.nts.go.kr/{i}") for i in range(4)]})
    retriever = WebRetriever(client, policy, cache=MemoryCache())

    await retriever.fast_search(Q)
    await retriever.fast_search(Q, refresh=True)
    assert len(client.calls) == 2


def test_search_key_ignores_site_order():
    assert search_key(Q, 10, ["a.kr", "b.kr"], "y1") == search_key(Q, 10, ["b.kr", "a.kr"], "y1")
    assert search_key(Q, 10, None, None) != search_key(Q, 20, None, None)
    assert search_key(Q, 10, None, None).startswith("search:")
