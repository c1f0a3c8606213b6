#!/usr/bin/env python3
"""
Smoke test script: uploads a random file through a running gateway, lists the
bucket, downloads the file again and verifies the bytes match.
"""
import argparse
import hashlib
import os
from urllib.parse import quote

import requests


def fetch_config(api_base: str):
    resp = requests.get(f"{api_base}/config", timeout=10)
    resp.raise_for_status()
    return resp.json()


def upload(api_base: str, region: str, bucket: str, filename: str, data: bytes) -> str:
    resp = requests.post(
        f"{api_base}/upload",
        data={"region": region, "bucket": bucket},
        files={"file": (filename, data, "application/octet-stream")},
        timeout=120,
    )
    resp.raise_for_status()
    return resp.json()["key"]


def list_names(api_base: str, region: str, bucket: str):
    resp = requests.get(f"{api_base}/files/{region}/{bucket}", timeout=30)
    resp.raise_for_status()
    return [item["name"] for item in resp.json()]


def download(api_base: str, region: str, bucket: str, key: str):
    digest = hashlib.sha256()
    received = 0
    with requests.get(
        f"{api_base}/download/{region}/{bucket}/{quote(key)}", stream=True, timeout=120
    ) as resp:
        resp.raise_for_status()
        for chunk in resp.iter_content(chunk_size=64 * 1024):
            digest.update(chunk)
            received += len(chunk)
        declared = int(resp.headers.get("Content-Length", "-1"))
        disposition = resp.headers.get("Content-Disposition", "")
    return digest.hexdigest(), received, declared, disposition


def main():
    parser = argparse.ArgumentParser(description="Run smoke test against a running gateway.")
    parser.add_argument("--api-base", default="http://localhost:8000")
    parser.add_argument("--region", help="Defaults to the first configured region")
    parser.add_argument("--bucket", help="Defaults to the region's first bucket")
    parser.add_argument("--size-mb", type=int, default=10)
    parser.add_argument("--filename", default="smoke-test.bin")
    args = parser.parse_args()

    config = fetch_config(args.api_base)
    region = args.region or config["regions"][0]
    bucket = args.bucket or config["buckets"][region][0]
    print(f"Using {region}/{bucket}")

    data = os.urandom(args.size_mb * 1024 * 1024)
    expected = hashlib.sha256(data).hexdigest()

    print(f"Uploading {len(data)} bytes...")
    key = upload(args.api_base, region, bucket, args.filename, data)

    print("Listing bucket...")
    if key not in list_names(args.api_base, region, bucket):
        raise SystemExit(f"Uploaded key {key!r} missing from listing")

    print("Downloading...")
    actual, received, declared, disposition = download(args.api_base, region, bucket, key)
    if declared != len(data) or received != len(data):
        raise SystemExit(f"Size mismatch: sent {len(data)}, declared {declared}, received {received}")
    if actual != expected:
        raise SystemExit("Downloaded content does not match the upload")
    if not disposition.startswith("attachment"):
        raise SystemExit(f"Unexpected Content-Disposition: {disposition!r}")

    print("Smoke test completed successfully.")


if __name__ == "__main__":
    main()
