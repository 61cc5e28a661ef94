#!/usr/bin/env python3
"""
Basic example of registering flags on a FlagRegistry and reading the parsed
values.

Try:
    python basic_example.py --ipaddress 10.0.0.1 --max-date 2024-05-01 input.txt
    python basic_example.py --retries=5 -- --passed --through
    python basic_example.py --help
"""

from datetime import datetime

from flagparse import FlagRegistry

registry = FlagRegistry(
    prog="basic_example", version="1.0.0", description="flagparse demo"
)
ip = registry.add_ip_address("--ipaddress", None, "The IP Address of the host")
date = registry.add_datetime("--max-date", datetime.now(), "The date to use")
retries = registry.add_int("-r|--retries", 3, "Number of retries")


if __name__ == "__main__":
    registry.parse_or_exit()

    if ip.value is not None:
        print(ip.value)
    print(date.value)
    print(f"retries: {retries.value}")
    print(f"positional: {registry.args}")
    print(f"remaining: {registry.remaining}")
