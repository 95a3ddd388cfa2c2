"""Vocabulary used by the gatekeeper and the verdict policy.

Word lists are plain tuples so a Gatekeeper instance can be built with an
extended or replaced list without touching this module.

Lists:
  CASUAL_WORDS: greetings, acknowledgements and fillers that never warrant
    verification on their own.
  PANIC_KEYWORDS: university-related misinformation triggers (exams,
    circulars, results, fees...). Multi-word entries are matched as phrases.
  ACADEMIC_REFERENCE_TERMS: questions answered by the local syllabus corpus.
  DISRUPTION_TERMS: institution-wide disruptions (closures, cancellations).
  ALARMIST_PHRASES: chain-message framing ("spread this", "urgent").
  DENIAL_MARKERS: phrases in evidence text that contradict a claim.
  UNCERTAINTY_MARKERS: phrases in an answer engine reply that carry no stance.
"""

from typing import Tuple

CASUAL_WORDS: Tuple[str, ...] = (
    "hi",
    "hello",
    "hey",
    "thanks",
    "thank",
    "ok",
    "okay",
    "bot",
    "bye",
    "good",
    "nice",
    "cool",
    "yes",
    "no",
    "maybe",
    "sure",
    "great",
    "awesome",
    "lol",
    "haha",
    "hmm",
    "oh",
    "ah",
    "wow",
)

PANIC_KEYWORDS: Tuple[str, ...] = (
    "postponed",
    "postpone",
    "exam",
    "exams",
    "syllabus",
    "leaked",
    "leak",
    "cancel",
    "cancelled",
    "canceled",
    "holiday",
    "holidays",
    "notice",
    "timetable",
    "schedule",
    "fake",
    "is it true",
    "is this true",
    "confirm",
    "rumor",
    "rumour",
    "official",
    "circular",
    "announcement",
    "deadline",
    "extended",
    "extension",
    "results",
    "result",
    "marks",
    "grade",
    "grades",
    "revaluation",
    "supplementary",
    "backlog",
    "attendance",
    "semester",
    "fee",
    "fees",
    "admission",
    "placement",
    "internship",
    "hostel",
    "mess",
    "library",
    "lab",
    "practical",
    "viva",
    "project",
    "thesis",
    "dissertation",
    "convocation",
    "degree",
    "certificate",
    "transcript",
    "migration",
    "transfer",
    "re-exam",
    "reexam",
    "compartment",
    "detained",
    "suspended",
    "expelled",
    "rusticated",
)

ACADEMIC_REFERENCE_TERMS: Tuple[str, ...] = (
    "syllabus",
    "subject",
    "subjects",
    "scheme",
    "module",
    "modules",
    "chapter",
    "chapters",
    "unit",
    "units",
    "curriculum",
)

DISRUPTION_TERMS: Tuple[str, ...] = (
    "shut",
    "shutdown",
    "closed",
    "closure",
    "close",
    "cancel",
    "cancelled",
    "canceled",
    "postponed",
    "postpone",
    "suspended",
    "strike",
    "lockdown",
    "holiday",
    "holidays",
    "leaked",
    "leak",
    "scrapped",
    "banned",
)

ALARMIST_PHRASES: Tuple[str, ...] = (
    "urgent",
    "breaking",
    "spread this",
    "share this",
    "forward this",
    "forward to all",
    "share with everyone",
    "before it gets deleted",
    "100% confirmed",
    "100% true",
    "confirmed news",
    "alert",
)

DENIAL_MARKERS: Tuple[str, ...] = (
    "fake",
    "hoax",
    "false",
    "not true",
    "no such",
    "denied",
    "denies",
    "rumour",
    "rumor",
    "misleading",
    "fabricated",
    "baseless",
    "no official",
    "has not been",
    "have not been",
    "not been cancelled",
    "not been postponed",
    "debunk",
)

UNCERTAINTY_MARKERS: Tuple[str, ...] = (
    "unable to verify",
    "cannot verify",
    "could not verify",
    "could not find",
    "no information",
    "no evidence",
    "not able to confirm",
)
