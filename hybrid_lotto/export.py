import io

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from hybrid_lotto.config import LotteryConfig
from hybrid_lotto.simulation import AnalysisResult

HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFF", size=12)
CENTER = Alignment(horizontal="center", vertical="center")
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)


def _style_header(ws):
    for cell in ws[1]:
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.alignment = CENTER
        cell.border = THIN_BORDER


def _style_last_row(ws):
    for cell in ws[ws.max_row]:
        cell.alignment = CENTER
        cell.border = THIN_BORDER


def _fit_columns(ws):
    for col in ws.columns:
        max_length = 0
        column = col[0].column_letter
        for cell in col:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[column].width = max_length + 2


class ExportManager:
    @staticmethod
    def export_to_excel(result: AnalysisResult) -> io.BytesIO:
        wb = Workbook()
        ws = wb.active
        ws.title = "Combinations"

        ws.append(['#'] + [f'Ball {i}' for i in range(1, LotteryConfig.MAIN_COUNT + 1)]
                  + ['Powerball', 'Count', 'Share %'])
        _style_header(ws)

        for idx, combo in enumerate(result.top_combinations, 1):
            share = combo.count / result.total_trials * 100 if result.total_trials else 0
            ws.append([idx] + list(combo.main_numbers) + [combo.special, combo.count, round(share, 4)])
            _style_last_row(ws)
        _fit_columns(ws)

        ws = wb.create_sheet("Analysis")
        ws.append(['Metric', 'Value'])
        _style_header(ws)

        rows = [
            ('Draws analysed', result.draws_analyzed),
            ('Simulations', result.total_trials),
            ('Hot balls', ', '.join(map(str, result.hot_main))),
            ('Cold balls', ', '.join(map(str, result.cold_main))),
            ('Hot powerball', result.hot_special),
            ('Cold powerball', result.cold_special),
        ]
        rows += [(f'Pair {i}', f"{', '.join(map(str, p))} ({c}x)") for i, (p, c) in enumerate(result.top_pairs, 1)]
        rows += [(f'Triplet {i}', f"{', '.join(map(str, t))} ({c}x)") for i, (t, c) in enumerate(result.top_triplets, 1)]
        for row in rows:
            ws.append(list(row))
            _style_last_row(ws)
        _fit_columns(ws)

        output = io.BytesIO()
        wb.save(output)
        output.seek(0)
        return output
