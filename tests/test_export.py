from openpyxl import load_workbook

from hybrid_lotto.export import ExportManager
from hybrid_lotto.simulation import AnalysisResult, RankedCombination


def make_result():
    return AnalysisResult(
        top_combinations=[
            RankedCombination((1, 2, 3, 4, 5), 10, 6),
            RankedCombination((2, 3, 4, 5, 6), 4, 2),
        ],
        hot_main=[7, 1, 2],
        cold_main=[30, 31],
        hot_special=3,
        cold_special=8,
        top_pairs=[((1, 2), 3), ((1, 7), 2)],
        top_triplets=[((1, 2, 7), 3)],
        total_trials=20,
        draws_analyzed=6,
    )


def test_export_to_excel():
    wb = load_workbook(ExportManager.export_to_excel(make_result()))

    assert wb.sheetnames == ["Combinations", "Analysis"]

    rows = list(wb["Combinations"].iter_rows(values_only=True))
    assert rows[0] == ('#', 'Ball 1', 'Ball 2', 'Ball 3', 'Ball 4', 'Ball 5', 'Powerball', 'Count', 'Share %')
    assert rows[1] == (1, 1, 2, 3, 4, 5, 10, 6, 30)
    assert rows[2][-2:] == (2, 10)

    analysis = {metric: value for metric, value in wb["Analysis"].iter_rows(min_row=2, values_only=True)}
    assert analysis['Hot balls'] == '7, 1, 2'
    assert analysis['Cold powerball'] == 8
    assert analysis['Pair 1'] == '1, 2 (3x)'
    assert analysis['Triplet 1'] == '1, 2, 7 (3x)'


def test_export_without_trials():
    result = make_result()._replace(top_combinations=[], total_trials=0)

    wb = load_workbook(ExportManager.export_to_excel(result))

    assert wb["Combinations"].max_row == 1
