import pytest

from ovrsvm import (
    SAMPLE_IRIS_CSV,
    Dataset,
    DatasetParseError,
    EmptyDataset,
    default_columns,
    parse_csv_text,
    read_dataset,
)


def test_iris_sample():
    dataset = parse_csv_text(SAMPLE_IRIS_CSV)
    assert dataset.columns == ("sepal_length", "sepal_width", "petal_length", "petal_width", "species")
    assert len(dataset) == 9
    assert dataset.rows[0]["sepal_length"] == "5.1"
    assert dataset.rows[-1]["species"] == "virginica"


def test_last_column_is_default_label():
    features, label = default_columns(parse_csv_text(SAMPLE_IRIS_CSV))
    assert label == "species"
    assert features == ["sepal_length", "sepal_width", "petal_length", "petal_width"]


def test_default_columns_without_columns():
    with pytest.raises(EmptyDataset):
        default_columns(Dataset(columns=(), rows=()))


def test_values_stay_raw_strings():
    dataset = parse_csv_text("a,b,label\n01,NA,1\n")
    assert dataset.rows[0] == {"a": "01", "b": "NA", "label": "1"}


def test_all_empty_rows_are_dropped():
    dataset = parse_csv_text("a,b,label\n1,2,x\n,,\n\n3,4,y\n")
    assert len(dataset) == 2
    assert [row["label"] for row in dataset.rows] == ["x", "y"]


def test_partially_empty_rows_are_kept():
    dataset = parse_csv_text("a,b,label\n1,,x\n")
    assert dataset.rows[0] == {"a": "1", "b": "", "label": "x"}


@pytest.mark.parametrize("text", ["", "a,b,label\n", "a,b,label\n,,\n"])
def test_no_rows(text):
    with pytest.raises(EmptyDataset):
        parse_csv_text(text)


def test_malformed_csv():
    with pytest.raises(DatasetParseError):
        parse_csv_text("a,b\n1,2\n3,4,5,6\n")


def test_read_dataset_from_file(tmp_path):
    path = tmp_path / "iris.csv"
    path.write_text(SAMPLE_IRIS_CSV, encoding="utf-8")
    dataset = read_dataset(path)
    assert len(dataset) == 9
    assert dataset.columns[-1] == "species"
