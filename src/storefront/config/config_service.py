# ⚙️ storefront/config/config_service.py
"""
⚙️ config_service.py — Сервіс для доступу до статичної конфігурації.

🔹 Клас `ConfigService`:
- Завантажує конфігурацію з config.yaml, а поверх неї — змінні середовища (.env).
- Надає єдиний метод .get() для доступу до будь-якого параметра за крапковим ключем.
- Працює як Singleton; `reset()` скидає екземпляр (для тестів).
"""

# 🌐 Зовнішні бібліотеки
import yaml                                  # 📦 YAML-парсинг
from dotenv import load_dotenv              # 🔐 Завантаження змінних із .env

# 🔠 Системні імпорти
import logging                              # 🧾 Логування
import os                                   # 📁 Доступ до змінних середовища
from pathlib import Path                    # 📁 Побудова шляху до файлів
from typing import Any, Callable, Dict, Optional  # 🧩 Типізація

# 🧩 Внутрішні модулі проєкту
from storefront.shared.utils.logger import LOG_NAME

logger = logging.getLogger(f"{LOG_NAME}.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"
CONFIG_PATH_ENV = "STOREFRONT_CONFIG"       # 📄 Альтернативний шлях до YAML

# 🔐 Змінні середовища → крапкові ключі
ENV_OVERRIDES: Dict[str, str] = {
    "PROMOTIONS_API_URL": "promotions.api_url",
    "PROMOTIONS_API_TOKEN": "promotions.api_token",
}


# ============================
# ⚙️ СЕРВІС ДОСТУПУ ДО КОНФІГІВ
# ============================
class ConfigService:
    """
    ⚙️ Надає доступ до всіх статичних конфігураційних параметрів проєкту.
    Працює як Singleton — конфігурація зчитується лише один раз.
    """

    _instance: Optional["ConfigService"] = None     # 🧩 Singleton-екземпляр
    _config: Dict[str, Any]                          # 📦 Обʼєднана конфігурація зі всіх джерел

    def __new__(cls):
        # ✅ Патерн Singleton: створюємо лише один екземпляр
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._config = {}
            instance._load_all_configs()             # 🔄 Завантаження конфігурації під час першого виклику
            cls._instance = instance
            logger.debug("🔄 Singleton ConfigService створено і конфігурація завантажена")
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """♻️ Забуває екземпляр: наступний `ConfigService()` перечитає джерела."""
        cls._instance = None

    def _load_all_configs(self) -> None:
        """
        📥 Завантажує всі джерела конфігурації в один словник.
        Пріоритет (останнє перемагає): config.yaml → змінні середовища / .env
        """

        # --- 1. YAML-файл ---
        yaml_path = Path(os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
        try:
            logger.debug("📘 Завантаження %s", yaml_path)
            with open(yaml_path, "r", encoding="utf-8") as f:
                self._deep_update(self._config, yaml.safe_load(f) or {})
        except (FileNotFoundError, yaml.YAMLError) as e:
            logger.warning("⚠️ Не вдалося завантажити %s: %s", yaml_path, e)

        # --- 2. .env змінні ---
        logger.debug("🔐 Завантаження змінних з .env")
        load_dotenv()                                # 🔐 Не перезаписує вже задані змінні середовища
        env_vars = {key: os.getenv(name) for name, key in ENV_OVERRIDES.items()}
        env_vars = {key: value for key, value in env_vars.items() if value}
        self._deep_update(self._config, self._unflatten_dict(env_vars))

        logger.info("✅ Конфігурацію успішно завантажено.")

    def get(self, key: str, default: Any = None, cast: Optional[Callable[[Any], Any]] = None) -> Any:
        """
        🔑 Отримує значення конфігурації за ключем (наприклад: 'promotions.api_url').

        Args:
            key (str): Ключ у форматі з крапкою.
            default (Any): Значення за замовчуванням, якщо ключ не знайдено.
            cast: Необовʼязкове приведення типу; при невдачі повертається default.

        Returns:
            Any: Значення параметра або default.
        """
        value: Any = self._config
        for k in key.split("."):                     # ⛓️ Розбиваємо ключ за крапкою
            if isinstance(value, dict) and k in value:
                value = value[k]                     # 🔎 Переходимо глибше в структуру
            else:
                logger.debug("❓ Ключ '%s' не знайдено, повертаємо значення за замовчуванням", key)
                return default
        if cast is not None and value is not None:
            try:
                return cast(value)
            except (TypeError, ValueError):
                logger.warning("⚠️ Ключ '%s' має невалідне значення %r", key, value)
                return default
        return value

    def as_dict(self) -> Dict[str, Any]:
        """📦 Копія верхнього рівня обʼєднаної конфігурації."""
        return dict(self._config)

    # ===============================
    # 🔧 ДОПОМІЖНІ МЕТОДИ ЗЛИТТЯ КОНФІГІВ
    # ===============================

    @staticmethod
    def _unflatten_dict(d: Dict[str, Any]) -> Dict[str, Any]:
        """
        🔁 Перетворює ключі з крапками в ієрархічний словник.
        'promotions.api_url' → {'promotions': {'api_url': ...}}
        """
        result: Dict[str, Any] = {}
        for key, value in d.items():
            parts = key.split(".")                   # 🧩 Розбиваємо ключ на частини
            d_ref = result
            for part in parts[:-1]:                  # 🔁 Ітеруємось по вкладеності
                d_ref = d_ref.setdefault(part, {})
            d_ref[parts[-1]] = value                 # 🧷 Вставляємо значення у найглибший рівень
        return result

    @classmethod
    def _deep_update(cls, source: Dict[str, Any], overrides: Dict[str, Any]) -> None:
        """
        🔁 Рекурсивно обʼєднує два словника (оновлення значень).
        Якщо значення — словник, обʼєднує його глибоко.
        """
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(source.get(key), dict):
                cls._deep_update(source[key], value)  # 🔁 Глибоке обʼєднання
            else:
                source[key] = value                    # 🧩 Перезапис простого значення
