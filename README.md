# videosgo

Building blocks for harvesting a video catalogue from MacCMS-style
resource sites and keeping it clean:

- **`videosgo.maccms`** – a rate-limited client for the MacCMS
  `videolist` / `detail` JSON API (`MacCMSClient`, `RateLimiter`,
  `VideoItem`, `VideoListResponse`, `MacCMSError`).
- **`videosgo.parser`** – parsing of the `$$$` / `#` / `$` play-group
  format into `PlayGroup` objects, m3u8 filtering, JSON storage form and
  front-end formatting.
- **`videosgo.domain_pool`** – splitting m3u8 URLs into host and path and
  detecting mirrors that serve the same path from several hosts (`PlayLink`).
- **`videosgo.title_cleaner`** – `TitleCleaner`, which strips quality,
  language, edition and episode noise from titles and scores how alike two
  titles are (Levenshtein plus bigram Jaccard).
- **`videosgo.playlines`** – `PlayLine` records built from play groups,
  merging without duplicate URLs, quality and language detection, and tag,
  year, title and HTML clean-up helpers.
- **`videosgo.probe`** – HTTP HEAD liveness checks for m3u8 links
  (`Probe`, `ProbeStats`).
- **`videosgo.config`** – settings loaded from defaults, a `.env` file and
  the environment.
- **`videosgo.guard`** – `OracleGuard`, an idle-load keeper that starts
  and stops `lookbusy` according to CPU and memory usage.
- **`videosgo.logger`** – package-wide JSON-lines logging helpers.

## Parsing play links

```python
from videosgo.parser import parse_play_groups, filter_m3u8, format_play_links

groups = parse_play_groups(
    "LineA$$$LineB",
    "Ep1$https://cdn1.example.com/v/1/index.m3u8#Ep2$https://cdn1.example.com/v/2/index.m3u8"
    "$$$Ep1$https://cdn2.example.com/v/1/index.mp4",
)
groups = filter_m3u8(groups)       # only LineA survives
print(format_play_links(groups))
# {'LineA': [{'name': 'Ep1', 'url': 'https://cdn1.example.com/v/1/index.m3u8'}, ...]}
```

`to_jsonb_array` and `parse_play_url_from_jsonb` turn groups into compact
JSON strings and back; strings that do not decode are skipped.

## Mirror domains

```python
from videosgo.domain_pool import extract_from_m3u8, build_alternate_urls

domain, path = extract_from_m3u8("https://cdn1.example.com:8443/2024/movie/index.m3u8")
# ('cdn1.example.com', '/2024/movie/index.m3u8')

build_alternate_urls(["cdn1.example.com", "cdn2.example.com"], path, "https")
# ['https://cdn1.example.com/2024/movie/index.m3u8',
#  'https://cdn2.example.com/2024/movie/index.m3u8']
```

When every link of a set shares one path, `extract_from_play_links` and
`extract_domains_from_play_groups` return the de-duplicated host pool and
that path; when paths differ the hosts cannot be swapped and an empty pool
is returned.

## Title matching

```python
from videosgo.title_cleaner import TitleCleaner

cleaner = TitleCleaner()
cleaner.clean("【高清】流浪地球2 HD 国语 (2023)")      # '流浪地球2'
cleaner.extract_year("流浪地球2 (2023)")             # 2023
cleaner.extract_episode("第十二集")                   # 12
cleaner.is_same_video("流浪地球2 HD", "流浪地球2 国语")  # True
```

`is_same_video` treats titles whose `similarity` is above 0.7 as the same
video. `build_play_lines` and `merge_play_lines` in `videosgo.playlines`
then let entries from several sites be collected as one list of play lines.

## Fetching and probing

```python
from videosgo.maccms import MacCMSClient
from videosgo.parser import parse_play_groups, filter_m3u8
from videosgo.probe import Probe

client = MacCMSClient(timeout=30)
items = client.fetch_all_pages("https://api.example.com/provide/vod", incremental=True)

probe = Probe(timeout=5, workers=10)
for item in items:
    groups = filter_m3u8(parse_play_groups(item.vod_play_from, item.vod_play_url))
    alive, stats = probe.probe_with_stats(groups)
```

`fetch_video_list` keeps only entries with an id, a name and play links,
and raises `MacCMSError` on transport errors, non-200 statuses, bad JSON or
an API code other than 1 or 200. Clients share one rate limiter by default
(a burst of 10, then one request per 0.1 s); `fetch_all_pages` stops after
1000 pages and waits `page_delay` seconds between pages. A link counts as
alive only when a HEAD request, without following redirects, answers 200.

## Configuration

`videosgo.config.load(env_file=".env", environ=None)` reads a `.env` file
and the process environment (`APP_ENV`, `APP_PORT`, `DB_HOST`, `DB_PORT`,
`REDIS_HOST`, `JWT_EXPIRE_HOURS`, `CORS_ALLOWED_ORIGINS` and so on);
non-empty environment values override the file, which overrides built-in
defaults. The returned `Config` offers `database.dsn()` and `redis.addr()`
as ready-made connection strings.

## Idle-load guard

`OracleGuard.start()` runs a background thread that, after an initial
delay, samples CPU and memory every `check_interval` seconds and starts
`nice -n 19 lookbusy -c 15 -m 6GB` when the system is idle or stops it when
memory or CPU is busy; `decide()` holds that rule on its own. `stop()` ends
the thread and lookbusy, and `get_stats()` reports counters.

## Logging

Call `videosgo.logger.configure()` to send the package's messages to
standard error as JSON lines; until then they are discarded.

## What this package does not do

It does not store videos, episodes or collection logs, run a scheduled
collector, serve an HTTP API, or talk to a database or Redis. The settings
in `videosgo.config` are only read and returned.

## Requirements

Python 3.10 or later, with `requests`, `psutil` and `python-dotenv`.
The idle-load guard additionally needs the `nice` and `lookbusy`
programs on the host; without `lookbusy` it only monitors.