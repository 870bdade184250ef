from app.core.formatting import format_answers, format_selection


def test_selection_is_joined_in_order():
    assert format_selection(["Swing Trading", "Day Trading"]) == "Swing Trading, Day Trading"


def test_empty_selection():
    assert format_selection([]) == ""


def test_only_multi_choice_answers_are_formatted(trading_questions, trading_answers):
    trading_answers["question6_additionalExperience"] = "Two years on NBA markets"

    formatted = format_answers(trading_answers, trading_questions)

    assert formatted == {
        "question3_tradingStyle": "Day Trading, Swing Trading",
        "question4_informationSources": "Historical data and statistics",
    }
