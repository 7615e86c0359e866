"""logstitch: rebuild one log stream from rotated gzip segments.

WHY: Log rotation leaves a pile of files like app.log.1.gz ... app.log.30.gz.
Reading the full history means decompressing them in numeric (not
lexicographic) order and concatenating the results.

HOW: Two-stage pipeline: order (core.ordering) then stream
(core.concat). The CLI wires them together with config, logging and a
progress display.

RULES:
- Ordering happens before any file is opened
- Decompression is streamed in bounded chunks, never whole files
- The output file is created fresh on every run
"""

__version__ = "0.1.0"
