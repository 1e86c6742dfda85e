"""coinparse: parse American-format crypto transaction text into validated records."""
