"""Pattern Compiler - Path pattern parsing, matching and building.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Pattern syntax:
- Literal segments: /users
- Named parameters: /users/:id
- Custom parameter patterns: /users/:id(\\d+)
- Modifiers: /:id? (optional), /:path* (zero or more), /:path+ (one or more)
- Unnamed groups: /files/(.*)
- Wildcards: /assets/*
- Escaped characters: /\\:literal
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote

from roadroute_core.errors import BuildError
from roadroute_core.utils.helpers import encode_uri_component

DEFAULT_DELIMITER = "/"

_PATH_REGEXP = re.compile(
    # Escaped characters: "\:" keeps a literal colon
    r"(\\.)"
    # Prefix, name, custom pattern, unnamed group, modifier, asterisk
    r"|([/.])?(?:(?::([A-Za-z0-9_]+)(?:\(((?:\\.|[^\\()])+)\))?"
    r"|\(((?:\\.|[^\\()])+)\))([+*?])?|(\*))"
)

_GROUP_SPECIALS = re.compile(r"([=!:$/()])")
_ASTERISK_SAFE = ";,/:@&=+$-_.!~*'()"


@dataclass(frozen=True)
class ParamDescriptor:
    """A named (or positional) parameter token of a pattern."""

    name: Union[str, int]
    prefix: str = ""
    delimiter: str = DEFAULT_DELIMITER
    optional: bool = False
    repeat: bool = False
    partial: bool = False
    asterisk: bool = False
    pattern: str = ""


Token = Union[str, ParamDescriptor]


@dataclass(frozen=True)
class Matcher:
    """Compiled pattern.

    Holds the regex and the descriptors of its capture groups, in the
    order they appear in the pattern.
    """

    regex: re.Pattern
    keys: Tuple[ParamDescriptor, ...] = field(default_factory=tuple)

    @property
    def groups(self) -> int:
        """Number of capture groups."""
        return self.regex.groups

    def test(self, path: str) -> bool:
        """Check if path matches."""
        return self.regex.match(path) is not None

    def exec(self, path: str) -> Optional[List[Optional[str]]]:
        """Return capture groups for path, or None if it does not match."""
        match = self.regex.match(path)
        if match is None:
            return None
        return list(match.groups())


def _escape_string(value: str) -> str:
    return re.escape(value)


def _escape_group(group: str) -> str:
    return _GROUP_SPECIALS.sub(r"\\\1", group)


def parse(path: str, delimiter: str = DEFAULT_DELIMITER) -> List[Token]:
    """Parse a pattern into literal strings and parameter descriptors."""
    tokens: List[Token] = []
    key = 0
    index = 0
    literal = ""

    for res in _PATH_REGEXP.finditer(path):
        offset = res.start()
        literal += path[index:offset]
        index = res.end()

        escaped = res.group(1)
        if escaped:
            literal += escaped[1]
            continue

        next_char = path[index] if index < len(path) else None
        prefix, name, capture, group, modifier, asterisk = res.group(2, 3, 4, 5, 6, 7)

        if literal:
            tokens.append(literal)
            literal = ""

        if name is None:
            name = key
            key += 1

        token_delimiter = prefix or delimiter
        custom = capture or group
        if custom:
            token_pattern = _escape_group(custom)
        elif asterisk:
            token_pattern = ".*"
        else:
            token_pattern = f"[^{_escape_string(token_delimiter)}]+?"

        tokens.append(ParamDescriptor(
            name=name,
            prefix=prefix or "",
            delimiter=token_delimiter,
            optional=modifier in ("?", "*"),
            repeat=modifier in ("+", "*"),
            partial=prefix is not None and next_char is not None and next_char != prefix,
            asterisk=bool(asterisk),
            pattern=token_pattern,
        ))

    if index < len(path):
        literal += path[index:]
    if literal:
        tokens.append(literal)

    return tokens


def tokens_to_regexp(
    tokens: List[Token],
    keys: Optional[List[ParamDescriptor]] = None,
    options: Optional[Mapping[str, Any]] = None,
) -> Matcher:
    """Compile parsed tokens into a matcher.

    Args:
        tokens: Output of parse()
        keys: Optional list that receives the parameter descriptors
        options: sensitive, strict, end, delimiter
    """
    options = options or {}
    strict = bool(options.get("strict", False))
    end = options.get("end", True) is not False
    found: List[ParamDescriptor] = []
    route = ""

    for token in tokens:
        if isinstance(token, str):
            route += _escape_string(token)
            continue

        prefix = _escape_string(token.prefix)
        capture = f"(?:{token.pattern})"
        found.append(token)

        if token.repeat:
            capture += f"(?:{prefix}{capture})*"

        if token.optional:
            if not token.partial:
                capture = f"(?:{prefix}({capture}))?"
            else:
                capture = f"{prefix}({capture})?"
        else:
            capture = f"{prefix}({capture})"

        route += capture

    delimiter = _escape_string(options.get("delimiter") or DEFAULT_DELIMITER)
    ends_with_delimiter = route.endswith(delimiter)

    # Trailing delimiter is optional unless strict
    if not strict:
        if ends_with_delimiter:
            route = route[:-len(delimiter)]
        route += f"(?:{delimiter}(?=\\Z))?"

    if end:
        route += "\\Z"
    elif not (strict and ends_with_delimiter):
        route += f"(?={delimiter}|\\Z)"

    flags = 0 if options.get("sensitive") else re.IGNORECASE
    if keys is not None:
        keys.extend(found)

    return Matcher(regex=re.compile(f"^{route}", flags), keys=tuple(found))


def regexp_to_matcher(
    regex: re.Pattern,
    keys: Optional[List[ParamDescriptor]] = None,
) -> Matcher:
    """Wrap a precompiled regex; its groups become positional descriptors."""
    found = [
        ParamDescriptor(name=i, delimiter="", pattern="")
        for i in range(regex.groups)
    ]
    if keys is not None:
        keys.extend(found)
    return Matcher(regex=regex, keys=tuple(found))


def path_to_regexp(
    path: Union[str, re.Pattern],
    keys: Optional[List[ParamDescriptor]] = None,
    options: Optional[Mapping[str, Any]] = None,
) -> Matcher:
    """Compile a pattern (or precompiled regex) into a matcher."""
    if isinstance(path, re.Pattern):
        return regexp_to_matcher(path, keys)

    options = options or {}
    tokens = parse(path, options.get("delimiter") or DEFAULT_DELIMITER)
    return tokens_to_regexp(tokens, keys, options)


def _encode_asterisk(value: Any) -> str:
    # encodeURI, with "?" and "#" escaped as well
    return quote(str(value), safe=_ASTERISK_SAFE)


def tokens_to_function(tokens: List[Token]) -> Callable[..., str]:
    """Create a path builder from parsed tokens."""
    checks: List[Optional[re.Pattern]] = [
        re.compile(f"(?:{t.pattern})") if isinstance(t, ParamDescriptor) else None
        for t in tokens
    ]

    def build(data: Optional[Mapping[Any, Any]] = None) -> str:
        data = data or {}
        path = ""

        for token, check in zip(tokens, checks):
            if isinstance(token, str):
                path += token
                continue

            value = data.get(token.name)

            if value is None:
                if token.optional:
                    # Partial tokens still emit their prefix
                    if token.partial:
                        path += token.prefix
                    continue
                raise BuildError(f'Expected "{token.name}" to be defined')

            if isinstance(value, (list, tuple)):
                if not token.repeat:
                    raise BuildError(
                        f'Expected "{token.name}" to not repeat, but received {list(value)!r}'
                    )
                if not value:
                    if token.optional:
                        continue
                    raise BuildError(f'Expected "{token.name}" to not be empty')

                for i, item in enumerate(value):
                    segment = encode_uri_component(item)
                    if not check.fullmatch(segment):
                        raise BuildError(
                            f'Expected all "{token.name}" to match "{token.pattern}", '
                            f'but received {segment!r}'
                        )
                    path += (token.prefix if i == 0 else token.delimiter) + segment
                continue

            if token.asterisk:
                segment = _encode_asterisk(value)
            else:
                segment = encode_uri_component(value)

            if not check.fullmatch(segment):
                raise BuildError(
                    f'Expected "{token.name}" to match "{token.pattern}", '
                    f'but received "{segment}"'
                )

            path += token.prefix + segment

        return path

    return build


def compile_builder(path: str, delimiter: str = DEFAULT_DELIMITER) -> Callable[..., str]:
    """Create a path builder for a pattern."""
    return tokens_to_function(parse(path, delimiter))


def param_names(tokens: List[Token]) -> List[Union[str, int]]:
    """Names of the parameter tokens, in pattern order."""
    return [t.name for t in tokens if isinstance(t, ParamDescriptor)]


__all__ = [
    "ParamDescriptor",
    "Token",
    "Matcher",
    "parse",
    "tokens_to_regexp",
    "regexp_to_matcher",
    "path_to_regexp",
    "tokens_to_function",
    "compile_builder",
    "param_names",
]
