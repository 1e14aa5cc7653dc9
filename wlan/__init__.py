"""Wi-Fi capture processing using tshark.

- Extracting WPS device fields from 802.11 captures into per-capture CSV files
- Bulk extraction over a directory tree

Requires tshark installed on the system.
"""
