from detection_studio.core.results import NO_OBJECTS_PLACEHOLDER, present, round_half_up


def test_single_cat_detection(detection):
    view = present([detection('cat', 0.87, (10, 10, 100, 50))], 12.4)

    assert view.object_count_text == '1'
    assert view.confidence_avg_text == '87%'
    assert view.processing_time_text == '12ms'
    assert view.placeholder is None
    assert len(view.rows) == 1
    row = view.rows[0]
    assert row.summary.startswith('1. cat')
    assert 'Akurasi: 87%' in row.summary
    assert row.summary.endswith('100×50px')


def test_empty_list_shows_placeholder_and_zeroes_statistics():
    view = present([], 250.0)

    assert view.object_count_text == '0'
    assert view.confidence_avg_text == '0%'
    assert view.processing_time_text == '0ms'
    assert view.rows == []
    assert view.placeholder == NO_OBJECTS_PLACEHOLDER


def test_count_and_average_confidence(detection):
    detections = [detection('cat', 0.5), detection('dog', 0.8), detection('bird', 0.9)]

    view = present(detections, 40.0)

    assert view.object_count == len(detections)
    assert view.confidence_avg_text == '73%'
    assert [row.rank for row in view.rows] == [1, 2, 3]
    assert [row.label for row in view.rows] == ['cat', 'dog', 'bird']


def test_rounding_is_half_up(detection):
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(86.49) == 86

    view = present([detection('dog', 0.125, (0, 0, 99.5, 20.4))], 0.5)

    assert view.rows[0].confidence_percent == 13
    assert view.rows[0].size_text == '100×20px'
    assert view.processing_time_text == '1ms'
