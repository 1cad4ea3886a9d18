import time

import numpy as np
import pandas as pd

from grtree import GainRatioTreeClassifier

# Generate synthetic categorical data
n_samples = 1000
rng = np.random.default_rng(42)
odors = ["a", "l", "n", "f", "c", "y"]
caps = ["b", "c", "x", "f", "k", "s"]

df = pd.DataFrame({
    "odor": rng.choice(odors, size=n_samples),
    "cap": rng.choice(caps, size=n_samples),
})
# Edible ("e") mostly for pleasant odors, with some noise
edible = df["odor"].isin(["a", "l", "n"]) ^ (rng.random(n_samples) < 0.05)
y = np.where(edible, "e", "p")

print("Data Sample:")
print(df.head())

clf = GainRatioTreeClassifier(positive_label="e")
t0 = time.time()
clf.fit(df.values, y)
print(f"Training Time: {time.time() - t0:.4f}s")
clf.print_tree(feature_names=list(df.columns))
print(f"Training accuracy: {clf.score(df.values, y):.3f}")
