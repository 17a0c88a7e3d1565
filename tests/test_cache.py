from unittest.mock import MagicMock, patch

from mentoring_service.infrastructure.cache import get_cache, invalidate, set_cache


@patch('mentoring_service.infrastructure.cache.get_redis')
def test_get_cache_hit(mock_redis):
    """Тест получения значения из кэша (hit)"""
    mock_client = MagicMock()
    mock_client.get.return_value = '[{"group_number": 1}]'
    mock_redis.return_value = mock_client

    result = get_cache("groups:list")
    assert result == [{"group_number": 1}]
    mock_client.get.assert_called_once_with("groups:list")


@patch('mentoring_service.infrastructure.cache.get_redis')
def test_get_cache_miss(mock_redis):
    """Тест получения значения из кэша (miss)"""
    mock_client = MagicMock()
    mock_client.get.return_value = None
    mock_redis.return_value = mock_client

    assert get_cache("groups:list") is None


@patch('mentoring_service.infrastructure.cache.get_redis')
def test_get_cache_error(mock_redis):
    """Тест: недоступный Redis - это промах"""
    mock_redis.side_effect = Exception("Redis error")

    assert get_cache("groups:list") is None


@patch('mentoring_service.infrastructure.cache.get_redis')
def test_set_cache(mock_redis):
    """Тест сохранения значения в кэш"""
    mock_client = MagicMock()
    mock_redis.return_value = mock_client

    assert set_cache("groups:list", [{"info": "Кафедра"}], ttl=60) is True
    mock_client.setex.assert_called_once_with("groups:list", 60, '[{"info": "Кафедра"}]')


@patch('mentoring_service.infrastructure.cache.get_redis')
def test_set_cache_error(mock_redis):
    mock_redis.side_effect = Exception("Redis error")

    assert set_cache("groups:list", []) is False


@patch('mentoring_service.infrastructure.cache.get_redis')
def test_invalidate(mock_redis):
    """Тест удаления ключей"""
    mock_client = MagicMock()
    mock_client.delete.return_value = 1
    mock_redis.return_value = mock_client

    assert invalidate("groups:list") == 1
    mock_client.delete.assert_called_once_with("groups:list")


@patch('mentoring_service.infrastructure.cache.get_redis')
def test_invalidate_error(mock_redis):
    mock_redis.side_effect = Exception("Redis error")

    assert invalidate("groups:list") == 0
    assert invalidate() == 0
