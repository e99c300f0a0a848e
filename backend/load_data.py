"""
Data Loader Script - Seeds student records through the HTTP API.

Reads a JSON array of student objects ({"name", "usn", "sem"}; "class"
is accepted for "sem") and POSTs each one to /api/students. Rows the
server rejects (missing fields, duplicate USN) are reported and skipped.

Usage:
    python load_data.py                                   # sample_students.json, localhost:3000
    python load_data.py http://localhost:3000             # Custom API URL
    python load_data.py http://localhost:3000 data.json   # Custom data file
"""

import json
import os
import sys

import httpx


def load_students(client: httpx.Client, students_url: str, rows: list) -> dict:
    """
    POST every row and collect the outcome.

    Returns:
        {"added": [...], "rejected": [(row, reason), ...]}
    """
    added, rejected = [], []
    for row in rows:
        resp = client.post(students_url, json=row)
        if resp.status_code == 201:
            added.append(resp.json()["student"])
        else:
            try:
                reason = resp.json().get("detail", resp.text)
            except ValueError:
                reason = resp.text
            rejected.append((row, reason))
    return {"added": added, "rejected": rejected}


def main():
    api_url = sys.argv[1] if len(sys.argv) > 1 else os.getenv("API_URL", "http://localhost:3000")
    students_url = f"{api_url.rstrip('/')}/api/students"

    default_file = os.path.join(os.path.dirname(os.path.abspath(__file__)), "sample_students.json")
    data_file = sys.argv[2] if len(sys.argv) > 2 else default_file
    if not os.path.exists(data_file):
        print(f"Error: Could not find {data_file}")
        sys.exit(1)

    print(f"Loading data from: {data_file}")
    with open(data_file, 'r') as f:
        rows = json.load(f)

    print(f"Found {len(rows)} students to load")
    print(f"Sending to: {students_url}")
    print()

    try:
        with httpx.Client(timeout=30.0) as client:
            result = load_students(client, students_url, rows)
    except httpx.HTTPError as exc:
        print(f"Error talking to {students_url}: {exc}")
        sys.exit(1)

    print("=" * 60)
    print("LOAD SUMMARY")
    print("=" * 60)
    print(f"  Total Received: {len(rows)}")
    print(f"  Added:          {len(result['added'])}")
    print(f"  Rejected:       {len(result['rejected'])}")
    print("=" * 60)
    print()

    for student in result["added"]:
        print(f"  ✅ {student['usn']}: {student['name']} (id: {student['id']})")
    for row, reason in result["rejected"]:
        print(f"  ❌ {row.get('usn', '?')}: {reason}")

    print()
    print(f"✅ Data loading complete! Visit {api_url} to view the students.")


if __name__ == "__main__":
    main()
