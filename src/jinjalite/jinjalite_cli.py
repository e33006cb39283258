"""
jinjalite CLI Entrypoint.

This module provides the command-line interface for parsing jinjalite templates.
It supports dumping the parsed AST or the raw token stream, and an interactive REPL.

Features:
    - Read source from template files or inline strings.
    - Lex and parse templates into an AST.
    - Output the AST (or tokens) as JSON to the console or a file.
    - Launch an interactive REPL with optional verbosity.

Example usage:
    jinjalite greeting.jinja
    jinjalite -s "Hello {{ user.name | title }}" -p
    jinjalite prompt.j2 -o prompt.ast.json
    jinjalite -s "{% for m in messages %}{{ m }}{% endfor %}" --tokens
    jinjalite --repl --verbose

Functions:
    run_jinjalite(source: str, is_string: bool = False, out: Optional[str] = None,
                  tokens: bool = False, pretty: bool = False) -> None:
        Executes the full pipeline (read → lex → parse → serialize → output).

    main() -> None:
        Parses CLI arguments and invokes the appropriate action (REPL or parse).
"""

import argparse
import json
import sys

from jinjalite.jinjalite_lexer import CharacterStream, Lexer
from jinjalite.jinjalite_parser import Parser

TEMPLATE_SUFFIXES = (".jinja", ".jinja2", ".j2", ".tmpl")


def run_jinjalite(
    source: str,
    is_string: bool = False,
    out: str | None = None,
    tokens: bool = False,
    pretty: bool = False,
) -> None:
    """
    Run the jinjalite front-end: lex, parse, and write the result as JSON.

    Args:
        source (str): Template source text or path to a template file.
        is_string (bool): If True, treats `source` as raw template text instead of a file path.
        out (str | None): Optional path to write the JSON output. If None, prints to stdout.
        tokens (bool): If True, outputs the token stream instead of the AST.
        pretty (bool): If True, indents the JSON and prints banners around it.

    Raises:
        ValueError: If `is_string` is False and the source is not a template file.
        SyntaxError: If the template cannot be lexed or parsed.
    """
    if not is_string and not source.endswith(TEMPLATE_SUFFIXES):
        raise ValueError(
            f"Only template files are supported ({', '.join(TEMPLATE_SUFFIXES)})."
        )
    # 1. Read source
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    # 2. Lexing
    token_list = Lexer(CharacterStream(source, 0, 1, 1)).tokenize()

    # 3. Parsing (skipped when only tokens are wanted)
    if tokens:
        payload: object = [
            {"type": t.type, "value": t.value, "line": t.line, "col": t.col}
            for t in token_list
        ]
        title = "Tokens"
    else:
        payload = Parser(token_list).parse().to_dict()
        title = "AST"

    # 4. Serialize
    text = json.dumps(payload, indent=2 if pretty else None, ensure_ascii=False)

    # 5. Output result
    if pretty and not out:
        banner = "=" * 20
        print(f"{banner}\n{title}\n{banner}\n{text}\n{banner}\n")
    elif not out:
        print(text)

    # 6. Optional write to file
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text)
        if pretty:
            print(f"(wrote to {out})")


def main() -> None:
    """
    Entry point for the jinjalite CLI.

    Parses command-line arguments and dispatches to the appropriate mode:
    - Launches the REPL if no arguments are passed or `--repl` is specified.
    - Otherwise, runs the front-end (lex → parse → JSON output).

    Supported flags:
        - `-s`, `--string`: Interpret source as raw template text instead of a file path.
        - `-o`, `--out`: Write JSON output to a file.
        - `--tokens`: Output the token stream instead of the AST.
        - `-p`, `--pretty`: Indent JSON and show banners.
        - `--repl`: Launch the interactive REPL.
        - `--verbose`: Verbose REPL mode (echo tokens).

    Lexer and parser errors are reported on stderr with exit status 1.
    """
    if len(sys.argv) == 1:
        # No args passed: open REPL instead
        from jinjalite.jinjalite_repl import start_repl

        start_repl()
        return
    parser = argparse.ArgumentParser(prog="jinjalite")
    parser.add_argument("source", nargs="?", help="Template file or raw text (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal template text"
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--tokens", action="store_true", help="Dump tokens instead of the AST"
    )
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="Show indented output with banners"
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Verbose REPL mode (if --repl)"
    )

    args = parser.parse_args()

    if args.repl or args.source is None:
        from jinjalite.jinjalite_repl import start_repl

        start_repl(verbose=args.verbose)
        return

    try:
        run_jinjalite(
            source=args.source,
            is_string=args.string,
            out=args.out,
            tokens=args.tokens,
            pretty=args.pretty,
        )
    except (SyntaxError, ValueError) as e:
        print(f"[error] >>> {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
