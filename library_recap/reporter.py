"""
Reporting and output functions module.

This module handles all display and output operations:
- Printing the headline summary
- Printing weekday, month and term breakdowns
- Printing session highlights, streaks and peak hours
- Generating JSON output
- Saving JSON to file
"""

import json
from dataclasses import asdict
from datetime import date, datetime
from zoneinfo import ZoneInfo

from library_recap.models import ProcessedStats


def format_duration(minutes: float) -> str:
    """e.g. 125 -> '2 h 5 min'"""
    hours = int(minutes // 60)
    mins = round(minutes % 60)
    if hours == 0:
        return f"{mins} min"
    if mins == 0:
        return f"{hours} h"
    return f"{hours} h {mins} min"


def format_minutes(minutes: float) -> dict:
    """Compact hours/minutes split, e.g. 125 -> {'hours': 2, 'mins': 5, 'display': '2h 5m'}"""
    hours = int(minutes // 60)
    mins = round(minutes % 60)
    if hours == 0:
        return {"hours": 0, "mins": mins, "display": f"{mins}m"}
    return {"hours": hours, "mins": mins, "display": f"{hours}h {mins}m"}


def _header(title: str):
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)


def print_summary(stats: ProcessedStats):
    """Print the headline numbers."""
    _header("LIBRARY RECAP")

    if stats.is_empty:
        print("\nNo data for this period.")
        return

    print(f"\n  Total time:        {format_duration(stats.total_minutes)} ({stats.analogy})")
    print(f"  Visits:            {stats.total_sessions}")
    print(f"  Longest visit:     {format_duration(stats.longest_session_minutes)} on {stats.longest_session_date}")
    print(f"  Average visit:     {format_duration(stats.average_session_minutes)}")
    print(f"  Earliest arrival:  {stats.earliest_arrival_hhmm} ({stats.earliest_arrival_label})")
    post_midnight = " [after midnight]" if stats.latest_departure_post_midnight else ""
    print(f"  Latest departure:  {stats.latest_departure_hhmm} ({stats.latest_departure_label}){post_midnight}")

    orphans = stats.orphan_filtering
    print(f"\n  Sessions: {orphans.raw_sessions} raw -> {orphans.merged_sessions} visits")
    print(f"  Ignored swipes: {orphans.orphan_out_ignored} stray exit(s), "
          f"{orphans.orphan_in_overwritten_ignored} overwritten entry(ies), "
          f"{orphans.orphan_in_at_end_ignored} unclosed entry(ies)")


def print_breakdowns(stats: ProcessedStats):
    """Print weekday, month and term totals."""
    _header("CALENDAR BREAKDOWN")

    if stats.is_empty:
        print("\nNo data for this period.")
        return

    print("\nBy weekday:\n")
    for entry in stats.day_of_week_data:
        print(f"  {entry.day}: {format_duration(entry.minutes):>14}  {entry.share_percent:5.1f}%  "
              f"({entry.total_visits} day(s), avg {format_duration(entry.average_minutes)})")
    print(f"\n  Busiest day: {stats.most_day}   Quietest day: {stats.least_day}")

    print("\nBy month:\n")
    for entry in stats.monthly_data:
        print(f"  {entry.month}: {format_duration(entry.minutes):>14}  ({entry.sessions} visit(s))")

    print("\nBy term:\n")
    for term in stats.terms:
        print(f"  {term.name} ({term.start} to {term.end})")
        print(f"    {format_duration(term.minutes)}, {term.visited_days}/{term.total_days} days "
              f"({term.consistency:.0%}) - {term.style}")
    print(f"  Outside term time: {format_duration(stats.outside_term_minutes)}")


def print_highlights(stats: ProcessedStats):
    """Print visit types, no-seat sessions, top sessions, streaks and peak hours."""
    _header("HIGHLIGHTS")

    if stats.is_empty:
        print("\nNo data for this period.")
        return

    visits = stats.visit_type_breakdown
    print(f"\n  Visit types: {visits.quick} quick, {visits.standard} standard, "
          f"{visits.long} long, {visits.marathon} marathon")

    no_seat = stats.no_seat
    print(f"  No-seat sessions (<= {no_seat.max_minutes:g} min): {no_seat.count} "
          f"({no_seat.share_pct_of_raw_sessions:.1f}% of raw sessions, {format_duration(no_seat.total_minutes)})")

    print("\n  Top sessions:")
    for s in stats.top_sessions:
        print(f"    - {s.date} {s.start_hhmm}-{s.end_hhmm}: {format_minutes(s.minutes)['display']}")

    print(f"\n  Longest visit streak: {stats.longest_visit_streak_days} day(s)")
    print(f"  Longest away streak:  {stats.longest_away_streak_days} day(s) (over {stats.dataset_span_days} days)")
    for streak in stats.top_streaks:
        print(f"    - {streak.days} days: {streak.start_date} to {streak.end_date}")

    peak = stats.peak_study_hours
    print(f"\n  Peak hours: {peak.display_range} ({peak.window_share:.0%} of study time) - {peak.persona}")


def _json_default(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def generate_json_output(stats: ProcessedStats) -> dict:
    """
    Generate a JSON-serializable document from the stats snapshot.
    """
    output = {
        "metadata": {
            "generated_at": datetime.now(ZoneInfo('UTC')).isoformat(),
            "schema_version": stats.schema_version,
            "empty": stats.is_empty,
        },
        "stats": asdict(stats),
    }
    # round-trip through the encoder so dates become ISO strings
    return json.loads(json.dumps(output, default=_json_default))


def save_json_output(output: dict, filepath: str = 'library_recap.json'):
    """
    Save the stats document to a JSON file.
    """
    with open(filepath, 'w') as f:
        json.dump(output, f, indent=2, ensure_ascii=False)
    print(f"JSON output saved to: {filepath}")
