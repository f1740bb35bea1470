# deepflow

A minimalist command-line tool for focused, single-tasking work sessions.
It helps you build a deep work habit and shows you your focus patterns,
all without leaving the terminal.

## Installation

```
pip install deepflow
```

This installs the `flow` command. Running `flow` with no command prints
the help.

## Everyday use

```
flow start --tag "writing docs"       # begin a session (tag defaults to "Deep Work")
flow start -t "review" --target 1h30m # with a target duration
flow status                           # how long you have been working
flow status --raw                     # only the tag, handy for prompts
flow pause                            # freeze the timer
flow resume                           # carry on; paused time is not counted
flow end                              # finish and log the session
```

Only one session runs at a time. Running `flow start` while a session is
active or paused shows its status instead of starting a new one. With a
target, `flow status` also shows how much time remains. Ending a paused
session logs it as finishing at the moment it was paused.

Durations are written like `45m`, `4h`, `3h30m` or `1.5h`.

## History and insights

```
flow recent                 # today's completed sessions and their total
flow log                    # the ten most recent sessions
flow log --today            # also --week (Sunday to Saturday), --month
flow log --all              # all history; may be combined with the filters
flow log --stats            # totals, averages, date range and top activities
flow log 2024-01            # sessions from one month
flow insights               # busiest weekday and top three activities
flow dashboard              # a 52-week contribution graph, yearly total and streak
```

`flow insights` needs at least ten logged sessions.

## Exporting

```
flow export                          # the ten most recent sessions as CSV
flow export --format json            # JSON instead of CSV
flow export --all --output all.csv   # everything, written to a file
flow export --today                  # also --week, --month
flow export 2024-01                  # one month
```

CSV output has the columns `tag`, `start_time`, `end_time`,
`duration_seconds`, `total_paused_seconds`, `duration_formatted` and
`total_paused_formatted`.

## Daily goal

```
flow goal --set 4h          # store the goal in the configuration file
flow goal                   # today's focus time against the goal
```

## Watching

`flow watch` runs in the foreground, for example in its own terminal tab,
and prints timestamped reminders to standard error: when no session has
been started for a while, when a session has been paused too long, and
when an active session has run long enough to deserve a break. Stop it
with Ctrl-C.

## Configuration

Settings live in `$XDG_CONFIG_HOME/flow/config.yml`
(by default `~/.config/flow/config.yml`):

```yaml
daily_goal: "4h"
watch:
  interval: "5m"
  remind_after_idle: "15m"
  remind_after_pause: "5m"
  remind_after_active: "2h"
```

Every value is optional; missing or unparsable durations fall back to the
defaults shown above. A file that is not valid YAML is reported as an error.

## Where data is kept

- The current session: `$FLOW_SESSION_PATH`, otherwise
  `$XDG_DATA_HOME/flow/session`, otherwise `~/.local/share/flow/session`.
  An older `~/.flow-session` file is still used if it exists.
- Completed sessions: one JSON Lines file per month, named like
  `202507_sessions.jsonl`, in `$XDG_DATA_HOME/flow/logs` (by default
  `~/.local/share/flow/logs`). Setting `FLOW_LOG_PATH` places the `logs`
  directory next to that path instead. Malformed lines are skipped.

## Hooks

Executable scripts in `$XDG_CONFIG_HOME/flow/hooks/` (by default
`~/.config/flow/hooks/`) named `on_start`, `on_pause`, `on_resume` or
`on_end` run on the matching event and receive the session tag as their
first argument. Hooks run on a best-effort basis; a failing hook never
stops the command.

## Other commands

```
flow doctor                 # check configuration, session and log setup
flow version                # print the version (also flow --version)
flow completion bash        # also zsh, fish, powershell
```

## Using it from Python

The pieces behind the commands can be used directly, for example
`deepflow.logs.LogReader`, `deepflow.logs.calculate_stats`,
`deepflow.insights.calculate_insights`, `deepflow.export.export_csv` and
`deepflow.export.export_json`, and `deepflow.durations.parse_duration`.

## What it does not do

There is no background service: nothing runs between commands except
`flow watch` while it is open. Reminders are printed to the terminal only,
not sent as desktop notifications. The version command reports `dev` and
no commit or build date.