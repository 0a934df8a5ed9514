"""Bulk-register students from a JSON file.

Usage: python -m student_portal.seed --file students.json

The file holds a list of student objects in the same shape the
`/student/register` endpoint accepts. Every record goes through
`StudentService.register_student`, so it gets the same conversion and
transaction handling as an HTTP request.
"""

import argparse
import json
import pathlib
from typing import Iterable, Optional
from pydantic import ValidationError
from sqlmodel import Session
from .database import create_db_and_tables, engine
from .schemas import StudentDTO
from .services import StudentService


def seed(session: Session, records: Iterable[dict]) -> dict:
    """Register each record and return `{created, errors}`.

    Invalid or rejected items are reported per index and do not stop
    the remaining records from being processed.
    """
    svc = StudentService(session)
    created = []
    errors = []
    for idx, raw in enumerate(records):
        try:
            dto = StudentDTO.model_validate(raw)
        except ValidationError as e:
            errors.append({'index': idx, 'error': str(e)})
            continue
        resp = svc.register_student(dto)
        body = json.loads(resp.body)
        if resp.status_code != 200:
            errors.append({'index': idx, 'error': body['error']['errorMessage']})
            continue
        created.append(body['response']['id'])
    return {'created': created, 'errors': errors}


def main(path: pathlib.Path) -> dict:
    records = json.loads(path.read_text(encoding='utf-8'))
    if not isinstance(records, list):
        raise ValueError('seed file must contain a JSON list of students')
    create_db_and_tables()
    with Session(engine) as session:
        result = seed(session, records)
    for student_id in result['created']:
        print(f'Registered student {student_id}')
    for err in result['errors']:
        print(f"Skipped item {err['index']}: {err['error']}")
    print(f"Total registered: {len(result['created'])}, errors {len(result['errors'])}")
    return result


def cli(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(description='Register students from a JSON file')
    parser.add_argument('--file', type=pathlib.Path, required=True, help='JSON file with a list of students')
    args = parser.parse_args(argv)
    main(args.file)


if __name__ == '__main__':
    cli()
