from task_scheduler.core.errors import TaskLoadError, TaskValidationError, sort_errors


def test_task_scoped_error_location():
    e = TaskValidationError(
        code="E_INVALID_ENUM",
        message="bad category",
        file="tasks.yaml",
        task_id="T2",
        field="category",
    )
    assert e.pointer == "tasks.T2.category"
    assert str(e) == "tasks.yaml:tasks.T2.category: E_INVALID_ENUM: bad category"


def test_task_without_field_points_at_the_task():
    e = TaskValidationError(code="L_DUPLICATE_ID", message="dup", task_id="T1")
    assert e.pointer == "tasks.T1"
    assert str(e) == "tasks.T1: L_DUPLICATE_ID: dup"


def test_explicit_path_and_fallback_location():
    e = TaskLoadError(code="E_FILE_NOT_FOUND", message="file does not exist", file="x.yaml")
    assert e.pointer is None
    assert str(e) == "x.yaml: E_FILE_NOT_FOUND: file does not exist"
    assert str(TaskValidationError(code="E_X", message="m")) == "<tasks>: E_X: m"
    assert TaskValidationError(code="E_X", message="m", path="config").pointer == "config"


def test_sort_errors_by_file_location_code():
    errors = [
        TaskValidationError(code="B", message="", file="a", task_id="T2", field="priority"),
        TaskValidationError(code="A", message="", file="a", task_id="T10"),
        TaskValidationError(code="C", message="", file="a", task_id="T2", field="priority"),
        TaskValidationError(code="Z", message="", file=None, path="tasks"),
    ]
    assert [e.code for e in sort_errors(errors)] == ["Z", "A", "B", "C"]
