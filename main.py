from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from truckinspect.checklist import all_item_ids, schema_payload
from truckinspect.config import get_settings
from truckinspect.errors import InspectionError, LayoutError, TemplateNotFoundError, TemplateTimeoutError
from truckinspect.export import run_export
from truckinspect.layout import find_unknown_ids, load_layout
from truckinspect.session import InspectionSession
from truckinspect.storage import read_json


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _load_session(answers: str) -> InspectionSession | None:
    answers_path = Path(answers).expanduser().resolve()
    if not answers_path.is_file():
        _print_json({'status': 'error', 'message': f'Answers file not found: {answers_path}'})
        return None
    try:
        payload = read_json(answers_path)
        if not isinstance(payload, dict):
            _print_json({'status': 'error', 'message': 'Answers file must contain a JSON object'})
            return None
        return InspectionSession.from_payload(payload)
    except json.JSONDecodeError as exc:
        _print_json({'status': 'error', 'message': f'Answers file is not valid JSON: {exc}'})
    except ValidationError as exc:
        _print_json({'status': 'error', 'message': f'Invalid answers: {exc}'})
    except InspectionError as exc:
        _print_json({'status': 'error', 'message': str(exc)})
    return None


def cmd_generate(args: argparse.Namespace) -> int:
    settings = get_settings()
    session = _load_session(args.answers)
    if session is None:
        return 2

    try:
        registry = load_layout(args.layout or settings.layout_path)
        result = run_export(
            session,
            settings=settings,
            registry=registry,
            template_source=args.template,
            output_dir=Path(args.output_dir) if args.output_dir else None,
        )
    except TemplateNotFoundError as exc:
        _print_json(
            {
                'status': 'error',
                'error': 'template_not_found',
                'message': str(exc),
            }
        )
        return 2
    except TemplateTimeoutError as exc:
        _print_json({'status': 'error', 'error': 'template_timeout', 'message': str(exc)})
        return 2
    except InspectionError as exc:
        _print_json({'status': 'error', 'error': type(exc).__name__, 'message': str(exc)})
        return 2

    _print_json(result.to_payload())
    return 0


def cmd_review(args: argparse.Namespace) -> int:
    session = _load_session(args.answers)
    if session is None:
        return 2
    _print_json(session.review().to_payload())
    return 0


def cmd_checklist(args: argparse.Namespace) -> int:
    _print_json(schema_payload())
    return 0


def cmd_layout(args: argparse.Namespace) -> int:
    settings = get_settings()
    try:
        registry = load_layout(args.layout or settings.layout_path)
    except LayoutError as exc:
        _print_json({'status': 'error', 'message': str(exc)})
        return 2

    payload = registry.to_config().model_dump(mode='json')
    payload['unknown'] = find_unknown_ids(registry, all_item_ids())
    payload['unplaced'] = [item_id for item_id in all_item_ids() if registry.resolve(item_id) is None]
    _print_json(payload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Truck inspection checklist to PDF')
    sub = parser.add_subparsers(dest='command', required=True)

    generate = sub.add_parser('generate', help='Render the inspection onto the PDF template')
    generate.add_argument('--answers', required=True, help='JSON file with header and checks')
    generate.add_argument('--template', required=False, help='Template PDF path or URL override')
    generate.add_argument('--layout', required=False, help='Coordinate layout JSON override')
    generate.add_argument('--output-dir', required=False, help='Directory for the generated PDF')
    generate.set_defaults(func=cmd_generate)

    review = sub.add_parser('review', help='Show the review summary for an answers file')
    review.add_argument('--answers', required=True, help='JSON file with header and checks')
    review.set_defaults(func=cmd_review)

    checklist = sub.add_parser('checklist', help='Print the checklist schema')
    checklist.set_defaults(func=cmd_checklist)

    layout = sub.add_parser('layout', help='Print the coordinate layout')
    layout.add_argument('--layout', required=False, help='Coordinate layout JSON override')
    layout.set_defaults(func=cmd_layout)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(get_settings().log_level).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
