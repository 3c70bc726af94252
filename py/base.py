"""Shortcut typenames, logging, basic helpers."""
import logging
import os
import re
import time
import typing as tg

import blessed
import rich
import rich.markup
import rich.table
import yaml


starttime = time.time()
num_errors = 0
msgs_seen = set()
_suppress_msg_duplicates = False
loglevel = logging.ERROR
loglevels = dict(DEBUG=logging.DEBUG, INFO=logging.INFO, WARNING=logging.WARNING,
                 ERROR=logging.ERROR, CRITICAL=logging.CRITICAL)

OStr = tg.Optional[str]
StrAnyDict = dict[str, tg.Any]  # JSON or YAML structure
T = tg.TypeVar('T')


def set_loglevel(level: str):
    global loglevel
    if level in loglevels:
        loglevel = loglevels[level]
    else:
        pass  # simply ignore nonexisting loglevels


class CritialError(Exception):
    pass


def as_fingerprint(raw: str) -> str:
    """Canonicalize fingerprint: all-uppercase, no blanks, no 0x prefix"""
    fpr = raw.replace(' ', '').upper()
    return fpr[2:] if fpr.startswith('0X') else fpr


def as_list(value: str | tg.Iterable[str] | None) -> list[str]:
    """A single string becomes a one-element list, None becomes []."""
    if value is None:
        return []
    if isinstance(value, (str, bytes)):
        return [value]
    return list(value)


def copyattrs(context: str, source: StrAnyDict, target: tg.Any,
              mustcopy_attrs: str, cancopy_attrs: str,
              typecheck: dict[str, type | tuple[type, ...]]=dict(), report_extra=False):  # noqa
    """
    Copies data from YAML mapping 'source' to object 'target' and checks attribute set of source.
    mustcopy_attrs and cancopy_attrs are comma-separated attribute name lists.
    mustcopy_attrs must exist; cancopy_attrs need not exist and keep target's value if missing.
    typecheck defines types for attrs that must not be str.
    Uses 'context' as location info in error messages.
    """
    def names_in(attrlist: str) -> list[str]:
        if not attrlist:
            return []
        return [a.strip() for a in attrlist.split(',')]
    mustcopy_names = names_in(mustcopy_attrs)
    cancopy_names = names_in(cancopy_attrs)
    if not source:
        source = dict()
    for mname in mustcopy_names:
        if mname not in source:
            critical(f"{context}: required attribute is missing: {mname}")
        setattr(target, mname, source[mname])
    for cname in cancopy_names:
        if cname in source:
            setattr(target, cname, source[cname])
        elif not hasattr(target, cname):
            setattr(target, cname, None)
    extra_attrs = set(source.keys()) - set(mustcopy_names) - set(cancopy_names)
    if report_extra and extra_attrs:
        warning(f"unexpected extra attributes found: {sorted(extra_attrs)}", file=context)
    for attrname, its_type in typecheck.items():
        value = getattr(target, attrname, None)
        if value is not None and not isinstance(value, its_type):
            critical(f"'{context}': attribute '{attrname}' should be {str(its_type)} (is '{value}')")


def expandvars(msg: str, context: str) -> str:
    result = os.path.expanduser(os.path.expandvars(msg))
    mm = re.search(r'\$\{|\$\w', result)  # leftover unexpanded variables
    if mm:
        warning(f"env variable undefined in '{result}'", context)
    return result


def slurp(resource: str) -> str:
    with open(resource, 'rt', encoding='utf8') as f:
        return f.read()


def slurp_bytes(resource: str) -> bytes:
    with open(resource, 'rb') as f:
        return f.read()


def slurp_yaml(resource: str) -> StrAnyDict:
    return yaml.safe_load(slurp(resource))


def spit_bytes(filename: str, content: bytes):
    with open(filename, 'wb') as f:
        f.write(content)


def suppress_msg_duplicates(suppression = True):
    global _suppress_msg_duplicates
    _suppress_msg_duplicates = suppression


def debug(msg: str):
    if loglevel <= logging.DEBUG:
        rich_print(msg)


def info(msg: str):
    if loglevel <= logging.INFO:
        rich_print(msg, "green")


def warning(msg: str, file: str = None):
    if loglevel <= logging.WARNING:
        msg = _process_params(msg, file)
        rich_print(msg, "yellow")


def error(msg: str, file: str = None):
    if loglevel <= logging.ERROR:
        msg = _process_params(msg, file)
        rich_print(msg, "red", count=1)


def critical(msg: str):
    rich_print(msg, "bold red", count=1)
    raise CritialError(msg)


def finalmessage():
    timing = "%.1f seconds" % (time.time() - starttime)
    if num_errors > 0:
        critical(f"==== {num_errors} error{plural_s(num_errors)}. {timing}. Exiting. ====")
    else:
        info(f"::: {timing} :::")


def plural_s(number, value="s") -> str:
    return value if number != 1 else ""


def yesses(template: str, candidates: tg.Iterable[T], yes_if_1=False) -> list[T]:
    """yesses("Shred %s?", ['a.txt','b.txt']) asks two yes/no questions and returns the item or None for each."""
    term = blessed.Terminal()
    result = []
    automatic_char = None  # if not None, assume all subsequent input chars to be this
    candidates = list(candidates)
    if yes_if_1 and len(candidates) == 1:
        return candidates
    for cand in candidates:
        while True:
            print(template % str(cand), "  (y,n,Y,N,?)\t", end='', flush=True)
            with term.cbreak():
                response = automatic_char or term.inkey()
            if str(response) in ('y', 'Y'):
                result.append(cand)
            elif str(response) in ('n', 'N'):
                result.append(None)
            else:
                print("  y:yes n:no Y:yes-to-all N:no-to-all")
                continue
            if str(response) in ('Y', 'N'):
                automatic_char = str(response).lower()
            print(str(response))
            break
    return result


def Table() -> rich.table.Table:
    """An empty Table in default pgpfront style"""
    return rich.table.Table(show_header=True, header_style="bold yellow",
                            show_edge=False, show_footer=False)


def rich_print(msg: str, enclose_in_tag: tg.Optional[str] = None, count=0):
    """Print any message, but if _suppress_msg_duplicates, print each one only once."""
    global num_errors, msgs_seen, _suppress_msg_duplicates
    if msg in msgs_seen and _suppress_msg_duplicates:
        return
    if msg not in msgs_seen:
        msgs_seen.add(msg)
        num_errors += count
    if enclose_in_tag:
        msg = f"[{enclose_in_tag}]{rich.markup.escape(msg)}[/{enclose_in_tag}]"
    else:
        msg = rich.markup.escape(msg)
    rich.print(msg)


def _process_params(msg: str, file: tg.Optional[str]):
    if file:
        msg = f"File '{file}':\n   {msg}"
    return msg


def _testmode_reset():
    """reset error counter; avoid text wrapping of b.error() etc."""
    global num_errors, msgs_seen, starttime, _suppress_msg_duplicates
    starttime = time.time()
    num_errors = 0
    msgs_seen = set()
    _suppress_msg_duplicates = False
    rich.get_console()._width = 10000
