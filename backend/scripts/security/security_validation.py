#!/usr/bin/env python3
"""
Script: security_validation.py
Purpose: Smoke-test the authentication guards of a running API

Every protected endpoint is called without a token and must answer 401.
/health must answer 200 and carry the security headers.

Usage:
    python scripts/security/security_validation.py [--base-url http://localhost:8000]

Exit code 0 when every check passed, 1 otherwise.
"""

import sys
import argparse
from typing import Dict, List, Optional

import requests

DEFAULT_BASE_URL = "http://localhost:8000"
TIMEOUT_SECONDS = 5

# (path under /api/v1, methods)
PROTECTED_ENDPOINTS = [
    ("/customers", ["GET", "POST"]),
    ("/customers/active", ["GET"]),
    ("/customers/1", ["GET", "PATCH", "DELETE"]),
    ("/orders", ["GET", "POST"]),
    ("/orders/stats", ["GET"]),
    ("/orders/production/schedule", ["GET"]),
    ("/orders/1", ["GET", "PATCH", "DELETE"]),
    ("/fitters", ["GET", "POST"]),
    ("/fitters/active", ["GET"]),
    ("/fitters/1", ["GET", "PATCH", "DELETE"]),
    ("/factories", ["GET", "POST"]),
    ("/factories/active", ["GET"]),
    ("/factories/1", ["GET", "PATCH", "DELETE"]),
    ("/presets", ["GET", "POST"]),
    ("/brands", ["GET", "POST"]),
    ("/leathertypes", ["GET", "POST"]),
    ("/comments", ["GET", "POST"]),
    ("/comments/order/1", ["GET"]),
    ("/auth/me", ["GET"]),
]

REQUIRED_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
}

CATEGORIES = {
    "Customer Endpoints": "/customers",
    "Order Endpoints": "/orders",
    "Fitter Endpoints": "/fitters",
    "Factory Endpoints": "/factories",
    "Catalog Endpoints": ("/presets", "/brands", "/leathertypes"),
    "Comment Endpoints": "/comments",
    "Auth Endpoints": "/auth",
    "System Endpoints": "/health",
}


def check_endpoint(session, base_url: str, path: str, method: str = "GET",
                   expected_status: int = 401, api_prefix: str = "/api/v1") -> Dict:
    """Call one endpoint without credentials and compare the status code"""
    url = f"{base_url.rstrip('/')}{api_prefix}{path}"
    result = {
        "endpoint": path,
        "method": method,
        "expected_status": expected_status,
        "actual_status": 0,
        "passed": False,
        "error": None,
    }
    try:
        response = session.request(method, url, timeout=TIMEOUT_SECONDS)
        result["actual_status"] = response.status_code
        result["passed"] = response.status_code == expected_status
    except requests.RequestException as e:
        result["error"] = str(e)
    return result


def check_health(session, base_url: str) -> List[Dict]:
    """/health answers 200 and sends the security headers"""
    results = []
    url = f"{base_url.rstrip('/')}/health"
    try:
        response = session.get(url, timeout=TIMEOUT_SECONDS)
    except requests.RequestException as e:
        return [{
            "endpoint": "/health", "method": "GET", "expected_status": 200,
            "actual_status": 0, "passed": False, "error": str(e),
        }]

    results.append({
        "endpoint": "/health", "method": "GET", "expected_status": 200,
        "actual_status": response.status_code,
        "passed": response.status_code == 200, "error": None,
    })

    for header, expected in REQUIRED_HEADERS.items():
        actual = response.headers.get(header)
        results.append({
            "endpoint": f"/health [{header}]", "method": "GET",
            "expected_status": 200, "actual_status": response.status_code,
            "passed": actual == expected,
            "error": None if actual == expected else f"expected {expected!r}, got {actual!r}",
        })

    return results


def run_suite(base_url: str = DEFAULT_BASE_URL, session: Optional[requests.Session] = None) -> List[Dict]:
    session = session or requests.Session()
    results = []
    for path, methods in PROTECTED_ENDPOINTS:
        for method in methods:
            results.append(check_endpoint(session, base_url, path, method, 401))
    results.extend(check_health(session, base_url))
    return results


def summarize(results: List[Dict]) -> Dict[str, Dict[str, int]]:
    """Passed/total per category"""
    summary = {}
    for category, prefixes in CATEGORIES.items():
        if isinstance(prefixes, str):
            prefixes = (prefixes,)
        matching = [r for r in results if r["endpoint"].startswith(prefixes)]
        if matching:
            summary[category] = {
                "passed": sum(1 for r in matching if r["passed"]),
                "total": len(matching),
            }
    return summary


def print_results(results: List[Dict]):
    passed = sum(1 for r in results if r["passed"])
    total = len(results)
    failed = total - passed

    print("\n📊 Security Validation Results\n")
    print("=" * 64)
    print(f"✅ Passed: {passed}/{total} ({passed / total * 100:.1f}%)")
    print(f"❌ Failed: {failed}/{total} ({failed / total * 100:.1f}%)")
    print("=" * 64 + "\n")

    failures = [r for r in results if not r["passed"]]
    if failures:
        print("❌ FAILED CHECKS:")
        for r in failures:
            print(f"   {r['method']} {r['endpoint']}")
            print(f"   Expected: {r['expected_status']}, Got: {r['actual_status']}")
            if r["error"]:
                print(f"   Error: {r['error']}")
            print()

    print("📋 SECURITY STATUS BY MODULE:")
    for category, counts in summarize(results).items():
        mark = "✅" if counts["passed"] == counts["total"] else "❌"
        print(f"   {mark} {category}: {counts['passed']}/{counts['total']}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Check that protected endpoints reject anonymous calls")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="API base URL")
    args = parser.parse_args(argv)

    print(f"🔒 Security validation against {args.base_url}")
    results = run_suite(args.base_url)
    print_results(results)

    return 0 if all(r["passed"] for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
