"""
Assessment Simulation Script

Walks one participant through a seeded assessment via the API:
1. Ensures the participant assessment exists
2. Opens the participant's session and answers questions one by one
3. Optionally stops half-way and re-opens the session to show the resume position
4. Completes the session and nominates reviewers

Usage:
    python scripts/simulate_assessment.py [--base-url URL] [--api-key KEY] [--cohort-assessment ID]

Examples:
    # Pulse (step-grouped) assessment seeded by scripts/seed_assessments.py
    python scripts/simulate_assessment.py

    # Flat 360 assessment, stopping after two answers to demonstrate resume
    python scripts/simulate_assessment.py --cohort-assessment seed-ca-360 --stop-after 2

Requires:
    pip install httpx
"""

import argparse
import sys
import uuid

import httpx

# === CONSTANTS ===
DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_API_KEY = "local-dev-key"
DEFAULT_COHORT_ASSESSMENT_ID = "seed-ca-pulse"
DEFAULT_REVIEWER_EMAILS = ["alex@acme.com", "sam@acme.com"]

SAMPLE_ANSWERS = [
    "Pretty good, most weeks were energising.",
    "Back-to-back meetings on Thursdays.",
    "Shipping the onboarding revamp.",
    "Hiring for the platform team.",
    "Delegating more of the release work.",
]


def print_header(title: str):
    print()
    print("=" * 70)
    print(title)
    print("=" * 70)


def request(client: httpx.Client, method: str, path: str, **kwargs) -> dict:
    response = client.request(method, path, **kwargs)
    if response.status_code >= 400:
        print(f"❌ {method} {path} -> {response.status_code}: {response.text}")
        sys.exit(1)
    return response.json() if response.content else {}


def flatten_questions(catalog: dict) -> list:
    return [question for group in catalog["groups"] for question in group["questions"]]


def open_session(client: httpx.Client, participant_assessment_id: str) -> dict:
    view = request(client, "POST", "/responses/sessions", json={
        "participant_assessment_id": participant_assessment_id,
        "respondent": {"type": "participant"},
    })
    progress = view["progress"]
    resume = view["resume"]
    print(f"Session {view['session']['id']} ({view['assessment_status']})")
    print(f"  Progress: {progress['answered']}/{progress['total']} ({progress['percentage']}%)")
    print(f"  Resume at question index {resume['question_index']}, step index {resume['step_index']}")
    return view


def run_simulation(base_url: str, api_key: str, cohort_assessment_id: str, participant_id: str,
                   stop_after: int = None, reviewer_emails: list = None):
    headers = {"X-API-Key": api_key}
    with httpx.Client(base_url=base_url, headers=headers, timeout=30.0) as client:
        print_header("PARTICIPANT ASSESSMENT")
        assessment = request(client, "POST", "/nominations/participant-assessments", json={
            "participant_id": participant_id,
            "cohort_assessment_id": cohort_assessment_id,
        })
        pa_id = assessment["id"]
        print(f"Participant {participant_id} -> assessment {pa_id} ({assessment['status']})")

        print_header("OPEN SESSION")
        view = open_session(client, pa_id)
        session_id = view["session"]["id"]
        questions = flatten_questions(view["catalog"])
        start = view["resume"]["question_index"]

        print_header("ANSWERING")
        for index in range(start, len(questions)):
            if stop_after is not None and index - start >= stop_after:
                print(f"Stopping after {stop_after} answer(s)")
                print_header("RE-OPEN SESSION")
                open_session(client, pa_id)
                return

            question = questions[index]
            answer = SAMPLE_ANSWERS[index % len(SAMPLE_ANSWERS)]
            result = request(client, "POST", f"/responses/sessions/{session_id}/advance", json={
                "question_id": question["id"],
                "answer_text": answer,
            })
            progress = result["progress"]
            print(f"Q{index + 1}: {question['question_text']}")
            print(f"  A: {answer}")
            print(f"  Progress {progress['percentage']}%  next={result['next_position']}")
            if result["completed"]:
                break

        result = request(client, "POST", f"/responses/sessions/{session_id}/complete")
        print(f"✅ Completed: status={result['session']['status']}")

        if reviewer_emails:
            print_header("NOMINATIONS")
            batch = request(client, "POST", "/nominations", json={
                "participant_assessment_id": pa_id,
                "nominated_by_id": participant_id,
                "external_reviewers": [{"email": email} for email in reviewer_emails],
            })
            print(f"Created: {len(batch['created'])}  skipped: {batch['skipped_duplicates']}")
            for key, error in batch["errors"].items():
                print(f"  ⚠️  {key}: {error}")
            summary = request(client, "GET", "/nominations/summary", params={"participant_assessment_id": pa_id})
            print(f"Active {summary['active']} / quota {summary['quota']} (remaining {summary['remaining']})")


def main():
    parser = argparse.ArgumentParser(description="Simulate a participant answering an assessment")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help=f"API base URL (default: {DEFAULT_BASE_URL})")
    parser.add_argument("--api-key", default=DEFAULT_API_KEY, help="API key for X-API-Key header")
    parser.add_argument("--cohort-assessment", default=DEFAULT_COHORT_ASSESSMENT_ID, help="Cohort assessment id")
    parser.add_argument("--participant-id", default=None, help="Participant id (default: random)")
    parser.add_argument("--stop-after", type=int, default=None, help="Stop after N answers and show resume")
    parser.add_argument("--no-nominations", action="store_true", help="Skip the nomination step")
    args = parser.parse_args()

    participant_id = args.participant_id or f"participant-{uuid.uuid4().hex[:8]}"
    try:
        run_simulation(
            base_url=args.base_url,
            api_key=args.api_key,
            cohort_assessment_id=args.cohort_assessment,
            participant_id=participant_id,
            stop_after=args.stop_after,
            reviewer_emails=None if args.no_nominations else DEFAULT_REVIEWER_EMAILS,
        )
    except httpx.HTTPError as e:
        print(f"❌ Request failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
