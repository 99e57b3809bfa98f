from quiz_core.progress import Progress, progress_for, render_progress_bar


def test_progress_percentage():
    assert progress_for(3, 10) == Progress(current=3, total=10, percentage=30)
    assert progress_for(1, 3).percentage == 33
    assert progress_for(10, 10).percentage == 100


def test_current_is_clamped_to_range():
    assert progress_for(0, 10) == Progress(current=1, total=10, percentage=10)
    assert progress_for(15, 10) == Progress(current=10, total=10, percentage=100)


def test_empty_quiz():
    assert progress_for(1, 0).percentage == 0


def test_label_and_bar():
    progress = progress_for(3, 10)
    assert progress.label == "Question 3 of 10"
    assert render_progress_bar(progress) == "▰▰▰▱▱▱▱▱▱▱ 30% Complete"
    assert render_progress_bar(progress_for(5, 5), width=4) == "▰▰▰▰ 100% Complete"
