import io
import json
import re
import traceback

from jinjalite.jinjalite_lexer import CharacterStream, Lexer, Token
from jinjalite.jinjalite_parser import Parser

BLOCK_OPEN = re.compile(r"\{%\s*(if|for)\b")
BLOCK_CLOSE = re.compile(r"\{%\s*(endif|endfor)\b")


def open_blocks(src: str) -> int:
    """Number of `if`/`for` blocks opened in `src` and not yet closed."""
    return len(BLOCK_OPEN.findall(src)) - len(BLOCK_CLOSE.findall(src))


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def start_repl(verbose: bool = False) -> None:
    print("jinjalite REPL. Type 'exit' or 'quit' to leave.")

    while True:
        try:
            src_lines: list[str] = []
            while True:
                prompt = ">>> " if not src_lines else "... "
                line = input(prompt)
                if line.strip() in ("exit", "quit") and not src_lines:
                    print("Exiting jinjalite REPL.")
                    return
                if line.endswith("\\"):
                    src_lines.append(line[:-1])
                    continue
                src_lines.append(line)
                if open_blocks("\n".join(src_lines)) <= 0:
                    break
            src = "\n".join(src_lines)
            if not src.strip():
                continue
            if src.strip().lower() == "verbose-mode":
                verbose = not verbose
                print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                continue

            try:
                tokens: list[Token] = Lexer(CharacterStream(src, 0, 1, 1)).tokenize()
            except SyntaxError:
                print_traceback()
                continue

            if verbose:
                print(f"[tokens] >>> {tokens}")

            try:
                program = Parser(tokens).parse()
            except SyntaxError:
                print_traceback()
                continue

            print(json.dumps(program.to_dict(), indent=2, ensure_ascii=False))

        except (KeyboardInterrupt, EOFError):
            print("\nExiting jinjalite REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
