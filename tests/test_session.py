import threading

import numpy as np
import pytest

from ovrsvm import (
    SAMPLE_IRIS_CSV,
    Dataset,
    EmptyDataset,
    InsufficientLabels,
    InvalidHyperparameter,
    KernelKind,
    LabelColumnIsFeature,
    MissingLabelColumn,
    ModelNotTrained,
    NonNumericFeature,
    Session,
    TrainingCancelled,
    TrainingConfig,
    parse_csv_text,
    resolve_kernel,
)
from ovrsvm import session as sm


LINEAR = TrainingConfig(kernel=KernelKind.LINEAR, cost=1.0)


def test_initial_state():
    state = sm.Empty()
    assert state.status == "Ready for dataset"
    with pytest.raises(EmptyDataset):
        sm.train(state, LINEAR)


def test_load_uses_last_column_as_label(xy_dataset):
    state = sm.load(sm.Empty(), xy_dataset)
    assert isinstance(state, sm.Loaded)
    assert state.status == "Dataset loaded"
    assert state.label_column == "label"
    assert state.feature_columns == ("x", "y")


def test_select_label_resets_features(xy_dataset):
    state = sm.select_label(sm.load(sm.Empty(), xy_dataset), "y")
    assert state.label_column == "y"
    assert state.feature_columns == ("x", "label")
    with pytest.raises(MissingLabelColumn):
        sm.select_label(state, "nope")


def test_toggle_feature_keeps_column_order(xy_dataset):
    state = sm.load(sm.Empty(), xy_dataset)
    state = sm.toggle_feature(state, "x")
    assert state.feature_columns == ("y",)
    state = sm.toggle_feature(state, "x")
    assert state.feature_columns == ("x", "y")
    with pytest.raises(LabelColumnIsFeature):
        sm.toggle_feature(state, "label")


def test_train_and_predict(xy_dataset, centroid_trainer):
    loaded = sm.load(sm.Empty(), xy_dataset)
    state = sm.train(loaded, LINEAR, trainer=centroid_trainer)
    assert isinstance(state, sm.Trained)
    assert state.status == "Model trained"
    assert state.accuracy == 1.0
    assert state.model.labels == ("A", "B")
    assert sm.predict(state, {"x": "5", "y": "0"}) == "A"
    assert sm.predict(state, {"x": "-5", "y": "0"}) == "B"


def test_reconfiguring_drops_the_model(xy_dataset, centroid_trainer):
    trained = sm.train(sm.load(sm.Empty(), xy_dataset), LINEAR, trainer=centroid_trainer)
    state = sm.toggle_feature(trained, "y")
    assert isinstance(state, sm.Loaded)
    with pytest.raises(ModelNotTrained):
        sm.predict(state, {"x": "1"})


def test_training_failure_keeps_loaded_configuration(centroid_trainer):
    dataset = parse_csv_text("a,label\n1,x\n2,x\n")
    loaded = sm.load(sm.Empty(), dataset)
    state = sm.train(loaded, LINEAR, trainer=centroid_trainer)
    assert isinstance(state, sm.Error)
    assert state.status == "Training failed"
    assert isinstance(state.error, InsufficientLabels)
    assert state.loaded == loaded


def test_non_numeric_column_reported_as_error(centroid_trainer):
    dataset = parse_csv_text("a,label\n1,x\nfoo,y\n")
    state = sm.train(sm.load(sm.Empty(), dataset), LINEAR, trainer=centroid_trainer)
    assert isinstance(state.error, NonNumericFeature)
    assert state.error.row_index == 1


@pytest.mark.parametrize("kwargs", [{"cost": 0}, {"cost": float("nan")}, {"max_workers": 0}, {"max_workers": True}, {"max_workers": 2.0}])
def test_training_config_validation(kwargs):
    with pytest.raises(InvalidHyperparameter):
        TrainingConfig(**kwargs)


def test_training_config_defaults():
    config = TrainingConfig()
    assert config.kernel is KernelKind.RBF
    assert config.cost == 1.0
    assert config.gamma is None


def test_training_config_accepts_numpy_integer_workers():
    config = TrainingConfig(max_workers=np.int64(2))
    assert config.max_workers == 2
    assert type(config.max_workers) is int


def test_non_numeric_gamma_falls_back_to_default(xy_dataset, centroid_trainer):
    loaded = sm.load(sm.Empty(), xy_dataset)
    state = sm.train(loaded, TrainingConfig(kernel=KernelKind.RBF, gamma="abc"), trainer=centroid_trainer)
    assert isinstance(state, sm.Trained)
    assert state.model.kernel == resolve_kernel(KernelKind.RBF, None, 2)


def test_load_without_columns():
    with pytest.raises(EmptyDataset):
        sm.load(sm.Empty(), Dataset(columns=(), rows=()))


# -----------------------------------------------------------------------------
# Background session
# -----------------------------------------------------------------------------

def test_session_publishes_model_with_accuracy(xy_dataset, centroid_trainer):
    with Session(trainer=centroid_trainer) as session:
        session.load(xy_dataset)
        state = session.submit_training(LINEAR).result(timeout=10)
        assert session.state is state
        assert isinstance(state, sm.Trained)
        assert state.accuracy == 1.0
        assert session.predict({"x": "2", "y": "1"}) == "A"


def test_session_iris_with_svc():
    with Session() as session:
        session.load(parse_csv_text(SAMPLE_IRIS_CSV))
        state = session.submit_training(TrainingConfig(kernel=KernelKind.RBF)).result(timeout=30)
        assert isinstance(state, sm.Trained)
        assert state.model.labels == ("setosa", "versicolor", "virginica")
        assert state.model.kernel.gamma == pytest.approx(0.25)
        assert state.accuracy >= 3 / 9
        for sepal_length, sepal_width, petal_length, petal_width in [
            ("5.1", "3.5", "1.4", "0.2"),
            ("4.9", "3.0", "1.4", "0.2"),
            ("5.8", "4.0", "1.2", "0.2"),
        ]:
            assert session.predict({
                "sepal_length": sepal_length,
                "sepal_width": sepal_width,
                "petal_length": petal_length,
                "petal_width": petal_width,
            }) == "setosa"


def _gated(trainer, gate, started):
    def run(features, labels, params):
        started.set()
        gate.wait(timeout=10)
        return trainer(features, labels, params)
    return run


def test_reload_discards_in_flight_training(xy_dataset, centroid_trainer):
    gate, started = threading.Event(), threading.Event()
    with Session(trainer=_gated(centroid_trainer, gate, started)) as session:
        session.load(xy_dataset)
        future = session.submit_training(LINEAR)
        assert started.wait(timeout=10)

        reloaded = session.load(xy_dataset)
        gate.set()

        with pytest.raises(TrainingCancelled):
            future.result(timeout=10)
        assert session.state is reloaded


def test_cancel_keeps_previous_state(xy_dataset, centroid_trainer):
    gate, started = threading.Event(), threading.Event()
    with Session(trainer=_gated(centroid_trainer, gate, started)) as session:
        loaded = session.load(xy_dataset)
        future = session.submit_training(LINEAR)
        assert started.wait(timeout=10)

        session.cancel()
        gate.set()

        with pytest.raises(TrainingCancelled):
            future.result(timeout=10)
        assert session.state is loaded


def test_submit_without_dataset():
    with Session() as session:
        with pytest.raises(EmptyDataset):
            session.submit_training(LINEAR)
