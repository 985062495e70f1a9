# seoq/report/json_report.py

"""
Генерация JSON-отчёта для seoq.

Сериализация результатов анализа страниц в файл.
"""
import json
from pathlib import Path
from typing import Sequence

from seoq.analysis.models import PageAnalysisResult


def results_to_data(results: Sequence[PageAnalysisResult]) -> list[dict]:
    """Список результатов -> JSON-совместимые словари."""
    return [result.model_dump(mode="json") for result in results]


def render_json(results: Sequence[PageAnalysisResult], output_path: Path | str) -> Path:
    """
    Сохраняет результаты анализа в формате JSON по указанному пути.

    :param results: результаты analyze_pages
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from seoq.report.json_report import render_json
    report_path = render_json(results, 'reports/issues.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    # Запись в файл с отступами и Unicode
    with output.open('w', encoding='utf-8') as f:
        json.dump({'pages': results_to_data(results)}, f, ensure_ascii=False, indent=2)

    return output
