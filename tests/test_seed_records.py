import pandas as pd

from scripts.seed_records import load_frame, split_tags, to_candidates


def test_split_tags():
    assert split_tags("budget|finance", 10) == ["budget", "finance"]
    assert split_tags(" budget , plan ,", 10) == ["budget", "plan"]
    assert split_tags(["a", " ", "b"], 10) == ["a", "b"]
    assert split_tags(None, 10) == []
    assert split_tags(float("nan"), 10) == []
    assert split_tags("|".join(f"t{i}" for i in range(12)), 10) == [f"t{i}" for i in range(10)]


def test_load_csv_skips_incomplete_rows(tmp_path):
    src = tmp_path / "records.csv"
    pd.DataFrame(
        {
            "description": ["network design spec", "", "hiring policy"],
            "tags": ["network|spec", "x", ""],
            "path": ["/uploads/net.pdf", "/uploads/empty.pdf", "/uploads/hr.pdf"],
        }
    ).to_csv(src, index=False)
    candidates = to_candidates(load_frame(src), 10)
    assert [(c.description, c.tags, c.path) for c in candidates] == [
        ("network design spec", ["network", "spec"], "/uploads/net.pdf"),
        ("hiring policy", [], "/uploads/hr.pdf"),
    ]


def test_load_csv_without_tags_column(tmp_path):
    src = tmp_path / "records.csv"
    src.write_text("description,path\nbudget plan,/uploads/b.xlsx\n")
    [c] = to_candidates(load_frame(src), 10)
    assert c.tags == []
