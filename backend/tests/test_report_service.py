from datetime import date, datetime

from gagyebu.services.report_service import content_disposition, report_filename


def test_report_filename_replaces_quote_and_slash_characters() -> None:
    filename = report_filename(
        '김씨네 "행복" 가계\\부/집',
        date(2024, 3, 1),
        date(2024, 3, 31),
        "csv",
        datetime(2024, 4, 1, 9, 30),
    )

    assert '"' not in filename
    assert "\\" not in filename
    assert "/" not in filename
    assert filename.endswith("_2024-03-01_2024-03-31_2024-04-01T09-30.csv")


def test_content_disposition_keeps_quoted_filename_intact() -> None:
    header = content_disposition('a"b\\c.csv')

    ascii_part = header.split("; ")[1]
    assert ascii_part == 'filename="a_b_c.csv"'
    assert "filename*=UTF-8''a%22b%5Cc.csv" in header


def test_content_disposition_falls_back_for_non_ascii_names() -> None:
    header = content_disposition("우리집_가계부_2024-03-01_2024-03-31_2024-04-01T09-30.xlsx")

    assert 'filename="2024-03-01_2024-03-31_2024-04-01T09-30.xlsx"' in header
    assert "filename*=UTF-8''%EC%9A%B0" in header
