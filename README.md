# groupbot

Building blocks for a group chat bot. Each module does one job and can be
used on its own, without any particular chat framework.

## Install

    pip install .

For running the tests:

    pip install ".[test]"
    pytest

The external `timidity` program is needed only for
`groupbot.midi.render_wav` and `groupbot.midi.text_to_wav`.

## Modules

- `groupbot.timerbits` – the `Timer` record with its packed
  month/day/week/hour/minute field (`month()`, `day()`, `week()`,
  `hour()`, `minute()`, `enabled()`, `info()`, `timer_id()`),
  `filled_timer` for building a timer from Chinese date phrases such as
  `12月每周的16点30分`, `filled_cron_timer`, `chinese_num_to_int` and
  `chinese_char_to_int`.
- `groupbot.schedule` – `next_wake_time(timer, now)` computes when a
  calendar timer should next wake; `should_fire(timer, now)` says whether
  it fires at that moment; `first_weekday` finds the first given weekday
  of a month.
- `groupbot.clock` – `Clock` keeps timers in an SQLite file and runs each
  one on a background thread, calling the `sender(self_id, group_id,
  segments)` you supply when it fires; `register_timer`, `cancel_timer`,
  `list_timers`, `get_timer` and `close` manage them. `CronSchedule`
  parses five-field cron expressions (and `@daily`-style descriptors);
  `alert_message` builds the message segments that are sent.
- `groupbot.midi` – note text such as `CCGGAAGR FFEEDDCR` to a MIDI file
  (`build_midi`, `write_midi`), a MIDI track back to note text
  (`midi_to_text`), rendering to WAV (`render_wav`, `text_to_wav`), and
  ear-training helpers (`random_target`, `target_answer`, `parse_note`,
  `note_name`, `octave`). Bad input raises `MidiParseError`.
- `groupbot.marriage` – `Registry`, the daily couple roster with
  `Status` and `Couple`, favorability between members and skill
  cooldowns, all in one SQLite file.
- `groupbot.matchmaking` – the rule checks for proposing, stealing a
  partner, divorce and matchmaking; each returns True or raises
  `RuleViolation` with the reason. `truncate_name` shortens names for
  drawing.
- `groupbot.holidays` – `Holiday` countdowns, `parse_holiday` and
  `format_holiday` for `dur_year_month_day` records, `weekend_message` and
  the `daily_message` reminder text.
- `groupbot.members` – `MemberStore`, `gist_url` and `verify_gist` for
  approving join requests through a timestamp kept in a gist.
- `groupbot.nsfw` – `judge` and `auto_judge` turn classifier `Scores`
  into a short verdict.
- `groupbot.studydb` – `GrammarStore`, `ListeningStore` and `KujiStore`
  read study material from SQLite files.
- `groupbot.reborn` – `Reborn` draws a weighted country and gender;
  `load_rates` reads the country weights from JSON.
- `groupbot.webtools` and `groupbot.lookup` – small clients for public
  web services (`beast_encode`, `beast_decode`, `nbnhhsh_guess`,
  `moegoe_url`, `juejuezi`, `search_jikipedia`, `format_definition`,
  `fetch_lolicon_image`). Failures raise `ServiceError` or
  `groupbot.lookup.LookupError`.

## Example

    from datetime import datetime
    from groupbot.timerbits import filled_timer
    from groupbot.schedule import next_wake_time

    timer = filled_timer(["", "12", "每周", "16", "30", "", "meeting"], 0, 42, False)
    print(timer.info(), next_wake_time(timer, datetime.now()))

## What it does not do

The package has no bot of its own: it does not connect to a chat server,
parse incoming commands or send messages by itself. `Clock` hands alerts
to the `sender` callable you give it, and the other modules return text,
data or raise exceptions for your own bot to act on. There is no command
to run and no trimming helper for long program output.