"""
robots.txt parsing for AI crawler access checks.

Groups are built the way crawlers read them: consecutive ``User-agent`` lines
share the rules that follow. A bot obeys the group that names it; when no
group names it, the ``*`` group applies; with neither, the bot is allowed.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class RobotsGroup:
    """One user-agent group from robots.txt."""
    user_agents: List[str] = field(default_factory=list)
    allow: List[str] = field(default_factory=list)
    disallow: List[str] = field(default_factory=list)

    def matches(self, bot_name: str) -> bool:
        """True if this group names the bot (case-insensitive token match)."""
        bot = bot_name.lower()
        return any(ua != "*" and bot in ua for ua in self.user_agents)

    @property
    def is_wildcard(self) -> bool:
        return "*" in self.user_agents

    def blocks_root(self) -> bool:
        """True if the group keeps the bot away from ``/``.

        ``Disallow: /`` (or ``/*``) blocks the site root; an ``Allow: /`` of
        equal specificity wins, as in Google's longest-match rule.
        """
        disallows_root = any(path in ("/", "/*") for path in self.disallow)
        allows_root = any(path in ("/", "/*", "/$") for path in self.allow)
        return disallows_root and not allows_root


@dataclass
class RobotsTxt:
    """Parsed robots.txt."""
    raw: str = ""
    groups: List[RobotsGroup] = field(default_factory=list)

    def group_for(self, bot_name: str) -> Optional[RobotsGroup]:
        """Return the group governing bot_name, or None when none applies."""
        named = [g for g in self.groups if g.matches(bot_name)]
        if named:
            return _merge(named)
        wildcard = [g for g in self.groups if g.is_wildcard]
        if wildcard:
            return _merge(wildcard)
        return None

    def allows(self, bot_name: str) -> bool:
        """Whether bot_name may fetch the site root (default-allow)."""
        group = self.group_for(bot_name)
        if group is None:
            return True
        return not group.blocks_root()


def _merge(groups: List[RobotsGroup]) -> RobotsGroup:
    merged = RobotsGroup()
    for group in groups:
        merged.user_agents.extend(group.user_agents)
        merged.allow.extend(group.allow)
        merged.disallow.extend(group.disallow)
    return merged


def parse_robots_txt(content: Optional[str]) -> RobotsTxt:
    """Parse robots.txt content into user-agent groups.

    Never raises; unknown directives and malformed lines are skipped.
    """
    robots = RobotsTxt(raw=content or "")
    current: Optional[RobotsGroup] = None
    last_was_agent = False

    for line in robots.raw.splitlines():
        line = line.split("#", 1)[0].strip()
        if not line or ":" not in line:
            continue

        directive, value = line.split(":", 1)
        directive = directive.strip().lower()
        value = value.strip()

        if directive == "user-agent":
            if current is None or not last_was_agent:
                current = RobotsGroup()
                robots.groups.append(current)
            current.user_agents.append(value.lower())
            last_was_agent = True
            continue

        last_was_agent = False
        if current is None:
            continue
        if directive == "allow" and value:
            current.allow.append(value)
        elif directive == "disallow" and value:
            # An empty Disallow means "allow everything"
            current.disallow.append(value)

    return robots
