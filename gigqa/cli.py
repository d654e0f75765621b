"""Command-line entrypoints for running the pipeline outside the HTTP service."""

import argparse
import json
import logging
import mimetypes
import sys
from dataclasses import replace
from typing import Any, Dict, List, Optional

from .agents import policies_from_config
from .config import ServiceConfig
from .errors import GigQAError
from .jobs import extract_job_details, generate_gig_image
from .llm_client import LLMClient
from .models import ImageWork, JobSpec, QualityCheckResult, TextWork, WorkArtifact
from .resolver import resolve_work
from .workflow import quality_check, review


def load_json(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_work(args: argparse.Namespace, config: ServiceConfig) -> WorkArtifact:
    if args.work_file:
        mime_type, _ = mimetypes.guess_type(args.work_file)
        if mime_type and mime_type.startswith("image/"):
            with open(args.work_file, "rb") as f:
                return ImageWork(data=f.read(), mime_type=mime_type, name=args.work_file)
        with open(args.work_file, "r", encoding="utf-8") as f:
            return TextWork(f.read())
    return resolve_work(args.work, timeout=config.request_timeout)


def emit(payload: Dict[str, Any], out: Optional[str]) -> None:
    text = json.dumps(payload, indent=2)
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text)
        print(f"Saved result to {out}")
    else:
        print(text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Multi-agent quality check and dispute review for gig work")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--policies", default=None,
                        help="Comma-separated agent policies (overrides GIGQA_ACTIVE_POLICIES)")
    parser.add_argument("--parallel", action="store_true", help="Run agent calls concurrently")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_work_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--job", required=True, help="Path to a job details JSON file")
        group = p.add_mutually_exclusive_group(required=True)
        group.add_argument("--work", help="Work sample text or an HTTP(S) URL")
        group.add_argument("--work-file", help="Path to a text or image work file")
        p.add_argument("--out", default=None)

    qc = sub.add_parser("quality-check", help="Score a work sample against a job")
    add_work_args(qc)

    rv = sub.add_parser("review", help="Arbitrate an employer's rejection")
    add_work_args(rv)
    rv.add_argument("--quality-result", required=True, help="Path to a prior quality-check JSON result")
    rv.add_argument("--reason", required=True, help="Employer's rejection reason")

    ex = sub.add_parser("extract-job", help="Extract job details from a blurb")
    ex.add_argument("blurb")
    ex.add_argument("--out", default=None)

    gi = sub.add_parser("generate-image", help="Generate a pixel-art gig image")
    gi.add_argument("--title", required=True)
    gi.add_argument("--description", required=True)
    gi.add_argument("--out", default="gig.png")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = ServiceConfig.from_env()
    if args.policies:
        config = replace(config, active_policies=[p.strip() for p in args.policies.split(",") if p.strip()])
    client = LLMClient(config)
    parallel = args.parallel or config.parallel_agents

    try:
        if args.command == "quality-check":
            result = quality_check(client, load_work(args, config), JobSpec.from_dict(load_json(args.job)),
                                   policies_from_config(config), parallel=parallel)
            emit(result.to_wire(), args.out)
        elif args.command == "review":
            prior = QualityCheckResult.from_wire(load_json(args.quality_result))
            verdict = review(client, load_work(args, config), JobSpec.from_dict(load_json(args.job)),
                             prior, args.reason, policies_from_config(config), parallel=parallel)
            emit(verdict.to_wire(), args.out)
        elif args.command == "extract-job":
            emit(extract_job_details(client, args.blurb).to_dict(), args.out)
        elif args.command == "generate-image":
            png = generate_gig_image(client, args.title, args.description)
            with open(args.out, "wb") as f:
                f.write(png)
            print(f"Saved image to {args.out}")
    except GigQAError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1
    except UnicodeDecodeError as e:
        print(f"Work file is not UTF-8 text or a known image type: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
