from __future__ import annotations

import logging
import time
import traceback
from pathlib import Path
from typing import List, Optional, Set, Tuple

import pandas as pd
import streamlit as st

from statswales.config import APP_NAME, APP_VERSION, DATASETS_DIR, LOG_FORMAT, LOG_LEVEL
from statswales.core.areas import AreaCollection
from statswales.core.datasets import DATASETS, DatasetSource
from statswales.core.errors import StatsWalesError
from statswales.core.loader import ImportFilters, load_areas, load_datasets

logger = logging.getLogger(__name__)

DEFAULT_YEAR_RANGE = (1991, 2020)
SESSION_KEY = "statswales_collection"


def _parse_codes(text: str) -> Set[str]:
    return {p.strip() for p in text.split(",") if p.strip() and p.strip().lower() != "all"}


def _dataset_label(dataset: DatasetSource) -> str:
    return f"{dataset.name} ({dataset.code})"


def _render_sidebar() -> Tuple[str, List[DatasetSource], ImportFilters]:
    st.sidebar.header("Import")

    directory = st.sidebar.text_input("Datasets directory", value=str(DATASETS_DIR))

    labels = {_dataset_label(d): d for d in DATASETS}
    chosen = st.sidebar.multiselect(
        "Datasets",
        options=list(labels.keys()),
        default=list(labels.keys()),
    )

    areas_text = st.sidebar.text_input("Authority codes (comma-separated, blank for all)", value="")
    measures_text = st.sidebar.text_input("Measure codes (comma-separated, blank for all)", value="")

    all_years = st.sidebar.checkbox("All years", value=True)
    years: Tuple[int, int] = (0, 0)
    if not all_years:
        start, end = st.sidebar.slider(
            "Years (inclusive)",
            min_value=1900,
            max_value=2100,
            value=DEFAULT_YEAR_RANGE,
        )
        years = (int(start), int(end))

    filters = ImportFilters(
        areas=_parse_codes(areas_text),
        measures=_parse_codes(measures_text),
        years=years,
    )
    return directory, [labels[c] for c in chosen], filters


def _load_collection(
    directory: str,
    datasets: List[DatasetSource],
    filters: ImportFilters,
) -> Tuple[AreaCollection, List[str]]:
    collection = AreaCollection()
    load_areas(collection, Path(directory), filters)
    failed = load_datasets(collection, Path(directory), datasets, filters)
    return collection, failed


def _render_area_tables(collection: AreaCollection) -> None:
    with st.expander("Text report (per area)", expanded=False):
        options = collection.codes()
        if not options:
            st.write("No areas imported.")
            return
        code = st.selectbox(
            "Area",
            options=options,
            format_func=lambda c: f"{c}: {collection.get_area(c).names.get('eng', c)}",
        )
        st.code(collection.get_area(code).to_table(), language=None)


def _render_frame(collection: AreaCollection) -> Optional[pd.DataFrame]:
    df = collection.to_frame()
    st.write(f"{collection.size()} areas, {len(df)} values")
    if df.empty:
        st.info("No measure values matched the current filters.")
        return None
    st.dataframe(df, use_container_width=True)
    return df


def _run_import(directory: str, datasets: List[DatasetSource], filters: ImportFilters) -> None:
    t0 = time.perf_counter()
    try:
        with st.spinner("Importing datasets..."):
            collection, failed = _load_collection(directory, datasets, filters)
        st.success(
            f"Imported {len(datasets) - len(failed)} of {len(datasets)} datasets "
            f"in {time.perf_counter() - t0:0.2f}s"
        )
        if failed:
            st.warning(f"Failed datasets: {', '.join(failed)} (see logs for details)")
    except StatsWalesError as exc:
        st.error(f"Import failed: {exc}")
        st.text_area("Traceback", value=traceback.format_exc(), height=220)
        st.session_state.pop(SESSION_KEY, None)
        return

    st.session_state[SESSION_KEY] = collection


def run_app() -> None:
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

    st.set_page_config(page_title=APP_NAME, page_icon="📊", layout="wide")
    st.title(APP_NAME)
    st.caption(f"Version {APP_VERSION}")

    directory, datasets, filters = _render_sidebar()

    if st.button("Import datasets", key="import_btn"):
        _run_import(directory, datasets, filters)

    collection = st.session_state.get(SESSION_KEY)
    if collection is None:
        st.write("Choose datasets and filters in the sidebar, then import.")
        return

    df = _render_frame(collection)
    _render_area_tables(collection)

    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "Download JSON",
            data=collection.to_json(),
            file_name="statswales.json",
            mime="application/json",
        )
    with col2:
        if df is not None:
            st.download_button(
                "Download CSV",
                data=df.to_csv(index=False),
                file_name="statswales.csv",
                mime="text/csv",
            )
