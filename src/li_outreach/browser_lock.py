"""Global async lock for the shared browser page.

One extraction pipeline may drive the page at a time; the HTTP surface and
the CLI acquire this lock before sending a request to the pipeline.
"""

import asyncio

browser_lock = asyncio.Lock()
