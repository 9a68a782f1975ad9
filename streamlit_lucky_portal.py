#!/usr/bin/env python3
# Streamlit portal
# - Thresholds from the uploaded feed CSV or a JSON snapshot
# - Sidebar overlay of every generation setting, seeded from thresholds
# - Odd/even table, gap histograms, positional heatmap, pattern ceilings
# - Generation runs in a worker process with a timeout
import json, time
import numpy as np, pandas as pd, streamlit as st, matplotlib.pyplot as plt

from draw_data import is_historical_draw, parse_lottery_csv, validate_draws
from number_generator import generate_in_worker
from threshold_criteria import ThresholdCriteria

SNAPSHOT_PATH = "data/external-data.json"
WORKER_TIMEOUT_S = 300

st.set_page_config(page_title="Lucky Picker", layout="wide")
st.title("Lucky Number Picker")

st.write("Upload the results CSV or a JSON snapshot (results array of 7 two-digit numbers).")
file = st.file_uploader("Draws file", type=["csv", "json"], accept_multiple_files=False)

def load_uploaded(f):
    raw = f.getvalue().decode("utf-8")
    if f.name.endswith(".json"):
        return validate_draws(json.loads(raw)["results"])
    return validate_draws(parse_lottery_csv(raw))

try:
    if file is not None:
        draws = load_uploaded(file)
    else:
        with open(SNAPSHOT_PATH, "r", encoding="utf-8") as fh:
            draws = validate_draws(json.load(fh)["results"])
except FileNotFoundError:
    st.info("Waiting for a draws file."); st.stop()
except Exception as e:
    st.error(f"Failed to load draws: {e}"); st.stop()

thresholds = ThresholdCriteria(draws)
st.success(f"Loaded {len(draws)} draws.")

with st.sidebar:
    st.header("Ranges")
    c1, c2 = st.columns(2)
    min_main = c1.number_input("Main min", 1, 99, 1, key="min_main_k")
    max_main = c2.number_input("Main max", 1, 99, 50, key="max_main_k")
    min_lucky = c1.number_input("Lucky min", 1, 99, 1, key="min_lucky_k")
    max_lucky = c2.number_input("Lucky max", 1, 99, 11, key="max_lucky_k")

    st.header("Thresholds")
    odd_range = st.slider("Odd numbers in main block", 0, thresholds.count_main, tuple(thresholds.odd_range), key="odd_k")
    sum_range = st.slider("Sum of main numbers", 0, max(250, thresholds.sum_max), (thresholds.sum_min, thresholds.sum_max), key="sum_k")
    main_gap = st.number_input("Max main gap", 1, max(49, thresholds.max_main_gap_threshold), int(thresholds.max_main_gap_threshold), key="main_gap_k")
    lucky_gap = st.number_input("Max lucky gap", 1, max(10, thresholds.max_lucky_gap_threshold), int(thresholds.max_lucky_gap_threshold), key="lucky_gap_k")
    cluster_max = st.number_input("Max numbers per decade", 1, 5, 3, key="cluster_k")
    with st.expander("Max multiples per base"):
        multiples = {b: st.number_input(f"Base {b}", 0, thresholds.count_main, int(m), key=f"mult_{b}_k")
                     for b, m in thresholds.max_multiples_allowed.items()}

    st.header("Search")
    min_score = st.number_input("Min positional frequency score (%)", 0.0, 100.0, 5.0, step=0.5, key="score_k")
    max_iterations = st.number_input("Max iterations", 1_000, 5_000_000, 1_000_000, step=10_000, key="iter_k")
    seed = st.number_input("Random seed (0 = random)", value=0, step=1, key="seed_k")

st.markdown("### Odd / even distribution")
st.dataframe(thresholds.odd_even_frame(), use_container_width=True)

def plot_gaps(frame, title):
    fig = plt.figure(figsize=(10, 2.8))
    for pair, grp in frame.groupby("pair"):
        plt.bar(grp["gap"] + 0.2 * pair, grp["count"], width=0.2, label=f"pair {pair + 1}")
    plt.xlabel("Gap"); plt.ylabel("Draws"); plt.title(title); plt.legend(); plt.tight_layout(); return fig

g1, g2 = st.columns(2)
with g1:
    st.pyplot(plot_gaps(thresholds.gap_histogram_frame("main"), "Main gaps per adjacent pair"))
with g2:
    st.pyplot(plot_gaps(thresholds.gap_histogram_frame("lucky"), "Lucky gaps per adjacent pair"))

st.markdown("### Positional heatmap")
heat = thresholds.heatmap_frame(1, int(max_main))
fig = plt.figure(figsize=(12, 3)); plt.imshow(np.power(heat.values, 0.6), aspect="auto", cmap="magma")
plt.yticks(range(len(heat.index)), [f"P{p + 1}" for p in heat.index]); plt.xticks(range(0, heat.shape[1], 5), heat.columns[::5])
plt.colorbar(); plt.tight_layout(); st.pyplot(fig)

st.markdown("### Max pattern probabilities")
st.dataframe(pd.Series(thresholds.max_pattern_probs, name="max %").round(2), use_container_width=True)

if st.button("Generate numbers"):
    cfg = thresholds.to_generation_config(
        min_main=int(min_main), max_main=int(max_main), min_lucky=int(min_lucky), max_lucky=int(max_lucky),
        odd_range=tuple(odd_range), sum_min=int(sum_range[0]), sum_max=int(sum_range[1]),
        max_main_gap_threshold=int(main_gap), max_lucky_gap_threshold=int(lucky_gap),
        cluster_max=int(cluster_max), max_multiples_allowed={b: int(m) for b, m in multiples.items()},
        min_score=float(min_score), max_iterations=int(max_iterations))
    start = time.perf_counter()
    with st.spinner("Searching..."):
        try:
            res = generate_in_worker(draws, cfg, seed=int(seed) or None, timeout=WORKER_TIMEOUT_S)
        except Exception as e:
            st.error(f"Generation failed: {e}"); st.stop()
    elapsed = time.perf_counter() - start
    if res.best_combination is None:
        st.warning(f"No combination passed every filter in {res.iterations} iterations. Try relaxing the thresholds.")
    else:
        combo = res.best_combination
        st.subheader(" ".join(combo[:cfg.count_main]) + "  |  " + " ".join(combo[cfg.count_main:]))
        st.write(f"Score {res.best_score:.2f}% after {res.iterations} iterations ({elapsed:.1f}s)")
        st.dataframe(pd.DataFrame({"value": combo, "historical %": np.round(res.best_positional_probabilities, 2)},
                                  index=[f"P{i + 1}" for i in range(len(combo))]), use_container_width=True)
    with st.expander("Rejections by filter"):
        st.json(res.checks.as_dict())

st.markdown("### Check numbers")
cols = st.columns(7)
def check_input(i):
    lo, hi = (int(min_main), int(max_main)) if i < 5 else (int(min_lucky), int(max_lucky))
    return cols[i].number_input(f"#{i + 1}", lo, hi, min(max(i + 1, lo), hi), key=f"chk_{i}")

picked = [check_input(i) for i in range(7)]
if st.button("Check"):
    st.write("Match found" if is_historical_draw(draws, picked) else "No matches found")
