"""Smoke evaluation for a deployed chat gateway.

Sends a handful of single-cell questions to /api/chat with Basic Auth and
prints a concise summary of each answer.

Usage:
  python eval_runner.py --base-url https://your-worker.example.com --password secret

Optional flags:
  --base-url    Base URL of the deployed gateway (default: http://localhost:8000)
  --password    Shared access password (default: $ACCESS_PASSWORD)
  --timeout     Request timeout in seconds (default: 60)
  --output      Save the JSON summary to this file
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Dict, List

import requests


EVAL_QUERIES: List[Dict[str, str]] = [
    {"name": "definition", "question": "What is scRNA-seq?"},
    {
        "name": "method_comparison",
        "question": "How do droplet-based and plate-based single-cell RNA sequencing protocols differ?",
    },
    {
        "name": "analysis_step",
        "question": "Why is normalization needed before clustering single-cell expression data?",
    },
    {
        "name": "multiomics",
        "question": "What does scATAC-seq measure and how is it integrated with scRNA-seq?",
    },
]


def post_chat(base_url: str, question: str, password: str, timeout: int) -> Dict[str, Any]:
    url = base_url.rstrip("/") + "/api/chat"
    resp = requests.post(url, json={"question": question}, auth=("eval", password), timeout=timeout)
    try:
        data = resp.json()
    except ValueError:
        data = {"error": f"Non-JSON response: status={resp.status_code}", "text": resp.text}
    if resp.status_code != 200:
        return {"error": f"HTTP {resp.status_code}", "status": resp.status_code, **data}
    return data


def summarize_result(name: str, result: Dict[str, Any]) -> Dict[str, Any]:
    if "error" in result:
        return {"name": name, "ok": False, "error": result["error"], "raw": result}

    answer = result.get("answer", "")
    references = result.get("references", [])
    return {
        "name": name,
        "ok": True,
        "answer_chars": len(answer),
        "mentions_general_info": "general" in answer.lower(),
        "references": references,
        "quota": result.get("quota", {}),
        "answer_preview": (answer[:200] + "...") if len(answer) > 200 else answer,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke-test a deployed chat gateway")
    parser.add_argument("--base-url", type=str, default="http://localhost:8000")
    parser.add_argument("--password", type=str, default=os.getenv("ACCESS_PASSWORD", ""))
    parser.add_argument("--timeout", type=int, default=60)
    parser.add_argument("--output", type=str, default=None, help="Save JSON summary to this file")
    args = parser.parse_args()

    print(f"Evaluating against {args.base_url}\n")

    summaries: List[Dict[str, Any]] = []
    for q in EVAL_QUERIES:
        print(f"Query: {q['name']}")
        res = post_chat(args.base_url, q["question"], args.password, timeout=args.timeout)
        summary = summarize_result(q["name"], res)
        summaries.append(summary)
        if not summary.get("ok"):
            print(json.dumps(summary, indent=2))
            print("\n" + "-" * 80 + "\n")
            continue
        print(f"  answer_chars: {summary['answer_chars']}  general_info: {summary['mentions_general_info']}")
        print(f"  references: {summary['references'] or '(none)'}")
        print(f"  preview: {summary['answer_preview']}")
        print("\n" + "-" * 80 + "\n")

    passed = sum(1 for s in summaries if s.get("ok"))
    print(f"{passed}/{len(summaries)} queries answered")

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(summaries, f, indent=2)
        print(f"\nSaved to {args.output}")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        sys.exit(1)
