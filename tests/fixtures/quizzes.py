"""Canned backend payloads."""

from __future__ import annotations

from typing import Any, Dict, Sequence


def quiz_payload(
    quiz_id: str = "Q1",
    *,
    question_ids: Sequence[int] = (1, 2, 3),
    title: str = "Modern Physics",
) -> Dict[str, Any]:
    letters = "ABC"
    return {
        "_id": quiz_id,
        "title": title,
        "questions": [
            {
                "question_id": qid,
                "question_text": f"Question {qid}?",
                "options": ["A", "B", "C", "D"],
                "correct_answer": letters[(qid - 1) % 3],
                "explanation": f"Because of reason {qid}.",
            }
            for qid in question_ids
        ],
    }


def result_payload(
    result_id: str = "R1",
    *,
    score: int = 2,
    total: int = 3,
    with_quiz: bool = True,
    created_at: str = "2026-10-18T09:30:00Z",
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "_id": result_id,
        "score": score,
        "totalQuestions": total,
        "answers": [
            {"question_id": 1, "selected_answer": "A", "is_correct": True},
            {"question_id": 2, "selected_answer": "C", "is_correct": False},
            {"question_id": 3, "selected_answer": "C", "is_correct": True},
        ],
        "analysis": {
            "strengths": ["Kinematics"],
            "weaknesses": ["Optics"],
            "recommendations": ["Revise lens formulas"],
        },
        "createdAt": created_at,
    }
    if with_quiz:
        payload["quiz"] = quiz_payload()
    return payload
