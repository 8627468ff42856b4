import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from adapters import GenerationError, fetch_model_catalog
from codec import (
    PayloadError,
    build_share_url,
    extract_token,
    normalize_payload,
    parse_payload_from_fragment,
    payload_digest,
    payload_to_pretty_json,
)
from config import find_config_path, get_config_value, get_llm_settings, load_config
from pipelines import (
    DEFAULT_MAX_CONTEXT_CHARS,
    RetrievalPipeline,
    format_retrieved_context,
    get_retrieval_pipeline,
)


def _read_payload_file(path: str) -> object:
    if path == "-":
        return json.load(sys.stdin)
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _load_link(link: str):
    payload = parse_payload_from_fragment(link)
    if payload is None:
        raise PayloadError("No payload found in link.")
    return payload


def _resolve_config_path(explicit: Path | None) -> Path | None:
    try:
        return find_config_path(explicit)
    except FileNotFoundError:
        return None


def cmd_encode(args) -> int:
    payload = normalize_payload(_read_payload_file(args.path))
    base_url = args.base_url
    if base_url is None:
        config_path = _resolve_config_path(args.config)
        config = load_config(config_path) if config_path else {}
        base_url = get_config_value(config, "share.base_url", "")
    print(build_share_url(payload, base_url))
    return 0


def cmd_decode(args) -> int:
    print(payload_to_pretty_json(_load_link(args.link)))
    return 0


def cmd_digest(args) -> int:
    print(payload_digest(_load_link(args.link)))
    return 0


def cmd_search(args) -> int:
    pipeline = RetrievalPipeline(llm=None, payload=_load_link(args.link))
    results = pipeline.retrieve(args.query, top_k=args.k)
    if args.jsonl:
        for r in results:
            print(json.dumps(r.model_dump(), ensure_ascii=False))
    elif args.context:
        print(format_retrieved_context(results, args.max_chars))
    else:
        for i, r in enumerate(results, 1):
            print(f"[{i}] {r.doc_title} ({r.chunk_id}) score={r.score:.4f}")
            print(r.content)
            print("-" * 80)
    return 0


def cmd_ask(args) -> int:
    config_path = find_config_path(args.config)
    token = extract_token(args.link)
    if token is None:
        raise PayloadError("No payload found in link.")
    pipeline = get_retrieval_pipeline(config_path, token=token, provider=args.provider)
    result = pipeline.query(args.question)
    print(result["response"])
    if args.show_context:
        print("\n=== Context ===")
        print(result["context"])
    return 0


def cmd_models(args) -> int:
    config = load_config(find_config_path(args.config))
    settings = get_llm_settings(config, args.provider)
    provider = settings.pop("provider")
    api_key = settings.pop("api_key")
    if not api_key:
        print(f"No API key configured for {provider}.", file=sys.stderr)
    for model in fetch_model_catalog(provider, api_key, **settings):
        print(model)
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Share a document corpus in a link and query it")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    pe = sub.add_parser("encode", help="Encode a payload JSON file into a share link")
    pe.add_argument("path", help="Payload JSON file, or - for stdin")
    pe.add_argument("--base-url", default=None, help="Base URL to attach the fragment to")
    pe.add_argument("--config", type=Path, default=None)
    pe.set_defaults(func=cmd_encode)

    pd = sub.add_parser("decode", help="Print the payload in a link as JSON")
    pd.add_argument("link", help="Share URL, #r=... fragment or bare token")
    pd.set_defaults(func=cmd_decode)

    pg = sub.add_parser("digest", help="Print the change-detection digest of a link")
    pg.add_argument("link")
    pg.set_defaults(func=cmd_digest)

    ps = sub.add_parser("search", help="Rank the chunks of a link against a query")
    ps.add_argument("link")
    ps.add_argument("query")
    ps.add_argument("--k", type=int, default=None, help="Result count (default: payload topK)")
    ps.add_argument("--max-chars", type=int, default=DEFAULT_MAX_CONTEXT_CHARS)
    ps.add_argument("--context", action="store_true", help="Print the assembled context")
    ps.add_argument("--jsonl", action="store_true")
    ps.set_defaults(func=cmd_search)

    pa = sub.add_parser("ask", help="Answer a question grounded in a link's corpus")
    pa.add_argument("link")
    pa.add_argument("question")
    pa.add_argument("--config", type=Path, default=None)
    pa.add_argument("--provider", default=None, help="Override the configured provider")
    pa.add_argument("--show-context", action="store_true")
    pa.set_defaults(func=cmd_ask)

    pm = sub.add_parser("models", help="List the chat models available to the configured key")
    pm.add_argument("--config", type=Path, default=None)
    pm.add_argument("--provider", default=None, help="Override the configured provider")
    pm.set_defaults(func=cmd_models)

    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        return args.func(args)
    except (PayloadError, GenerationError, ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
