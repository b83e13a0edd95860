# zeroplug

Building blocks for a group chat bot. Each module does one job and knows
nothing about a particular chat connection: the bot that uses them passes in
message texts, user and group ids, and functions that send messages or fetch
data. Outgoing messages are built as CQ-code segments.

## What is inside

| Module | Purpose |
| --- | --- |
| `zeroplug.message` | CQ-code message segments: `Segment`, `text`, `image`, `at`, `at_all`, `record`, `to_cq`, `unescape_cq` |
| `zeroplug.timerspec` | Reminder specifications from Chinese date phrases: `Timer`, `filled_timer`, `filled_cron_timer`, `chinese_num_to_int`, `chinese_char_to_int` |
| `zeroplug.wakeup` | When a date-style reminder should next wake up and whether it fires: `next_wake_time`, `should_fire`, `first_weekday` |
| `zeroplug.clock` | Running and storing reminders in SQLite, date-style and cron-style: `Clock`, `CronSchedule`, `timer_message` |
| `zeroplug.groupadmin` | Mute lengths, card and title length checks, the "lucky member" draw, the join quiz and the plugin-data switches |
| `zeroplug.greetings` | Per-group welcome and farewell texts (`GreetingStore`, `render_greeting`, `default_farewell`) |
| `zeroplug.gist` | Approving join requests by a timestamp posted in a gist: `parse_join_answer`, `gist_url`, `GistVerifier` |
| `zeroplug.midi` | Note strings such as `CCGGAAGR` to MIDI and back, and the `ListeningPractice` ear-training game |
| `zeroplug.moyu` | Weekend and holiday countdowns: `Holiday`, `parse_holiday`, `weekend`, `daily_digest` |
| `zeroplug.nsfw` | Short verdicts from image classifier `Scores`: `judge`, `auto_judge` |
| `zeroplug.hyaku` | The Ogura Hyakunin Isshu poems loaded from CSV: `Poem`, `load_poems`, `image_urls`, `poem_number` |
| `zeroplug.github` | Repository search and text summaries |
| `zeroplug.nbnhhsh` | Guesses for pinyin abbreviations |
| `zeroplug.juejuezi` | Client of the "绝绝子" phrase generator |
| `zeroplug.nativesetu` | A local picture library split into classes by folder, indexed by difference hash (`SetuLibrary`) |
| `zeroplug.nativewife` | A per-group picture gallery whose draw stays the same for a nickname all day (`WifeGallery`) |
| `zeroplug.omikuji` | Daily fortune slip numbers, slip image URLs and the `KujiBook` of explanations |
| `zeroplug.hearthstone` | Card search, card pictures and deck code images (`HearthstoneClient`) |
| `zeroplug.pixivsearch` | Keyword illustration search and captions |
| `zeroplug.jandan` | Collecting picture URLs from a paged board into a `PictureStore` |
| `zeroplug.lolicon` | A bounded `ImageQueue` of random pictures, refilled on request |

## Reminders

A reminder command such as "在12月周一的8点30分时提醒大家开会" is split by the
bot's pattern into its parts; `filled_timer` turns those parts into a `Timer`:

```python
from zeroplug.timerspec import filled_timer, chinese_num_to_int

fields = ["", "12", "周一", "8", "30", "", "开会"]
timer = filled_timer(fields, self_id=0, group_id=123, match_date_only=False)
timer.enabled()   # True
timer.week()      # 1
timer.info()      # the normalised text that timer_id() hashes

chinese_num_to_int("十二")  # 12
```

When a field is out of range the timer stays disabled and its `alert` says why.

`Clock` keeps timers in an SQLite file, runs each one in a background thread
and delivers it through the send function you give it, which is called with
the bot id, the group id and the list of message segments:

```python
from zeroplug.clock import Clock
from zeroplug.message import to_cq
from zeroplug.timerspec import filled_cron_timer

def send(self_id, group_id, segments):
    print(group_id, to_cq(segments))  # hand the message to your bot here

with Clock("timers.db", send) as clock:
    clock.register_timer(filled_cron_timer("0 9 * * *", "早上好", "", 0, 123), save=True)
    print(clock.list_timers(123))
```

Cron-style timers accept five-field expressions, the `@daily`-style
descriptors and `@every <duration>`. Timers stored in the database are started
again when a `Clock` is opened on it.

## Notes to MIDI

```python
from zeroplug.midi import process_one, write_midi, midi_to_text

process_one("C#6")                              # MIDI note number
path = write_midi("CCGGAAGR FFEEDDCR", "song.mid", timbre=40)
midi_to_text(path.read_bytes(), 0)              # back to a note string
```

A note is a letter from `A` to `G`, optionally followed by `b` or `#`, an
octave number and a length written as `<n` (a power of two of a quarter
note). `R` is a rest. Input that cannot be parsed raises `MidiParseError`;
a timbre outside 0–127 raises `ValueError`. `render_wav` and `str_to_music`
run the external `timidity` program, which must be installed.

## What the package does not do

- It is not a bot: there is no process to start, no command-line entry point,
  no connection to a chat service and no matching of incoming messages to
  commands. The calling bot does that and uses these modules for the work.
- `zeroplug.moyu` does not fetch holiday dates itself; pass registry values to
  `parse_holiday`.
- `zeroplug.nsfw` does not classify images; it only turns scores you already
  have into a verdict.

## Running the tests

Install the `test` extra and run `pytest`.