"""Plain-text rendering of quiz results for chat front ends."""
from typing import Sequence

from countryquiz.config import Settings
from countryquiz.models.base import RoundStatus
from countryquiz.models.player import Player
from countryquiz.models.round import Round
from countryquiz.schemas.player import StatisticsSummary

MEDALS = ("🥇", "🥈", "🥉")
QUESTION_PROMPT = "🏳️ Which country does this flag belong to?"


def describe_outcome(round_object: Round) -> str:
    """Human-readable summary of a resolved round."""
    if round_object.status != RoundStatus.RESOLVED.value:
        raise ValueError(f"Round {round_object.round_id} is not resolved")

    if round_object.is_correct:
        elapsed = round_object.elapsed_seconds if round_object.elapsed_seconds is not None else 0
        return (
            "✅ *Correct!*\n\n"
            f"🏳️ Country: {round_object.country_name}\n"
            f"⭐ Points: {round_object.points:+d}\n"
            f"⏱️ Time: {elapsed} sec."
        )
    return (
        "❌ *Wrong!*\n\n"
        f"🏳️ Correct answer: {round_object.country_name}\n"
        f"💭 Your answer: {round_object.submitted_answer}\n"
        f"⭐ Points: {round_object.points:+d}"
    )


def format_statistics(summary: StatisticsSummary) -> str:
    return (
        "📊 *Your statistics:*\n\n"
        f"🎮 Games played: {summary.total_games}\n"
        f"✅ Correct answers: {summary.correct}\n"
        f"❌ Wrong answers: {summary.incorrect}\n"
        f"🎯 Accuracy: {summary.accuracy:.1f}%\n"
        f"⭐ Total score: {summary.total_score}"
    )


def format_leaderboard(players: Sequence[Player]) -> str:
    if not players:
        return "No players on the leaderboard yet."

    lines = [f"🏆 *Top {len(players)} players:*", ""]
    for index, player in enumerate(players):
        rank = MEDALS[index] if index < len(MEDALS) else f"{index + 1}."
        lines.append(
            f"{rank} *{player.display_name}* - {player.total_score} points ({player.accuracy:.1f}%)"
        )
    return "\n".join(lines)


def help_text(settings: Settings) -> str:
    return (
        "📚 *Commands:*\n\n"
        "/start - Register with the bot\n"
        "/play - Start a new game\n"
        "/stats - Your statistics\n"
        "/leaderboard - Top players\n"
        "/help - Show this help\n\n"
        "🎯 *Rules:*\n"
        f"• Correct answer: {settings.points_correct:+d} points\n"
        f"• Wrong answer: {settings.points_incorrect:+d} points\n"
        "• Goal: score as many points as you can!"
    )
