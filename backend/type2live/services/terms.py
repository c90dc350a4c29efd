"""Term storage: loading the dictionary and importing vocabulary."""

import csv

from flask import current_app

from type2live import db
from type2live.models import Term
from type2live.services.game import DictionaryEntry, TermDictionary

DEFAULT_TERMS = [
    # (display_text, difficulty, category, description)
    ('api', 1, 'web', 'Application programming interface'),
    ('git', 2, 'tools', 'Distributed version control system'),
    ('sql', 3, 'database', 'Structured query language'),
    ('queue', 2, 'data structure', 'First-in first-out collection'),
    ('stack', 2, 'data structure', 'Last-in first-out collection'),
    ('docker', 3, 'infrastructure', 'Container platform'),
    ('python', 2, 'language', 'General-purpose programming language'),
    ('kubernetes', 5, 'infrastructure', 'Container orchestration system'),
    ('javascript', 3, 'language', 'Scripting language of the web'),
    ('json', 2, 'format', 'JavaScript Object Notation'),
    ('proxy', 4, 'network', 'Intermediary server forwarding requests'),
    ('lazy', 4, 'concept', 'Deferring work until it is needed'),
    ('regex', 4, 'concept', 'Regular expression'),
    ('websocket', 4, 'network', 'Full-duplex protocol over a single TCP connection'),
    ('hash', 3, 'concept', 'Fixed-size digest of arbitrary data'),
    ('cache', 2, 'concept', 'Fast storage for recently used data'),
    ('compiler', 3, 'tools', 'Translates source code into another language'),
    ('jvm', 5, 'runtime', 'Java virtual machine'),
    ('oauth', 5, 'security', 'Delegated authorization framework'),
    ('byzantine', 8, 'distributed systems', 'Fault model with arbitrary failures'),
]


def load_dictionary() -> TermDictionary:
    """Read every stored term into an in-memory dictionary."""
    terms = Term.query.order_by(Term.id).all()
    entries = [
        DictionaryEntry(
            id=t.id,
            display_text=t.display_text,
            difficulty_tier=max(1, int(t.difficulty_id or 1)),
            description=t.description,
            category=t.category,
        )
        for t in terms
    ]
    try:
        current_app.logger.info(f"[dictionary-load] entries={len(entries)}")
    except Exception:
        pass
    return TermDictionary(entries)


def upsert_term(display_text, difficulty, category=None, description=None) -> bool:
    """Insert or update a term by display text. Returns True when created."""
    term = Term.query.filter_by(display_text=display_text).first()
    created = term is None
    if created:
        term = Term(display_text=display_text)
    term.difficulty_id = max(1, int(difficulty))
    term.category = category or None
    term.description = description or None
    db.session.add(term)
    return created


def seed_default_terms() -> int:
    for display_text, difficulty, category, description in DEFAULT_TERMS:
        upsert_term(display_text, difficulty, category, description)
    db.session.commit()
    return len(DEFAULT_TERMS)


def import_terms_csv(path):
    """Import terms from a CSV with a header row.

    Columns: ``display_text``, ``difficulty``, optional ``category`` and
    ``description``. Blank display texts are skipped.
    """
    created = updated = 0
    with open(path, newline='', encoding='utf-8') as fh:
        for row in csv.DictReader(fh):
            text = (row.get('display_text') or '').strip()
            if not text:
                continue
            if upsert_term(text, row.get('difficulty') or 1, row.get('category'), row.get('description')):
                created += 1
            else:
                updated += 1
    db.session.commit()
    current_app.logger.info(f"[terms-import] path={path} created={created} updated={updated}")
    return created, updated
