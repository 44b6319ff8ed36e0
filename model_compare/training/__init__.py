"""
Comparison Doctrine

One comparison run trains several classifier kinds on the SAME
deterministic train/test split, scores each on the held-out partition,
and folds the heterogeneous native outputs into flat, comparable tables.

Flow (strictly one-directional, no retries):

    Partition -> Train -> Score -> Aggregate

- Train / Score fan out per model; each model is an independent branch.
- A failing branch is recorded (ModelFailure) and excluded; it never
  aborts the other branches.
- Aggregation only sees models that survived both train and score.
"""
